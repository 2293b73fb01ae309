"""Quaternion telemetry anomaly detection and repair.

Quaternions arrive in records of :data:`~ancillax.constants.SAMPLES_PER_RECORD`
samples.  Three known downlink anomalies are recognized by comparing sample
times against the samples exactly one record earlier:

- **Missing record**: at the second sample of a record, the gap to the
  previous record is two record lengths.  The two samples read so far are
  moved one record forward and a full record of blank, invalid samples is
  inserted in front of them.  Only one missing record can be repaired per
  pass; the output buffer holds one extra record for it.
- **Duplicate tail**: at the last sample of a record, the last two sample
  times repeat those of the previous record.  The final 22 samples are
  blanked.
- **Duplicate head**: at the same point, the first two sample times of the
  record repeat those of the previous record.  The first 29 samples are
  blanked.

Blanked samples get a zero quaternion, an invalid flag and a time one
nominal period after the preceding sample.  Every sample is then validated
by its norm.

The scan is inherently sequential (each repair shifts the samples that
follow) and runs on NumPy copies of the inputs.
"""

from __future__ import annotations

import logging

import numpy as np

from ancillax.calibration import AncillaryQAThresholds
from ancillax.constants import QUATERNION_SAMPLE_PERIOD, SAMPLES_PER_RECORD
from ancillax.telemetry._types import L0RAttitude, QuaternionBuffer

logger = logging.getLogger(__name__)

DUPLICATE_TAIL_SAMPLES = 22
"""Samples blanked by a duplicate-tail repair."""

DUPLICATE_HEAD_SAMPLES = 29
"""Samples blanked by a duplicate-head repair."""

_RECORD_DURATION = SAMPLES_PER_RECORD * QUATERNION_SAMPLE_PERIOD


def _blank(time: np.ndarray, quaternion: np.ndarray, valid: np.ndarray, start: int, stop: int) -> None:
    for j in range(start, stop):
        time[j] = time[j - 1] + QUATERNION_SAMPLE_PERIOD
        quaternion[j] = 0.0
        valid[j] = False


def _is_missing_record(time: np.ndarray, index: int) -> bool:
    gap = 2.0 * _RECORD_DURATION
    return (
        abs(time[index] - time[index - SAMPLES_PER_RECORD] - gap) < QUATERNION_SAMPLE_PERIOD
        and abs(time[index - 1] - time[index - 1 - SAMPLES_PER_RECORD] - gap)
        < QUATERNION_SAMPLE_PERIOD
    )


def _repeats_previous_record(time: np.ndarray, index: int) -> bool:
    # Sample `index` and its predecessor match the samples one record back
    return (
        abs(time[index] - time[index - SAMPLES_PER_RECORD]) < QUATERNION_SAMPLE_PERIOD
        and abs(time[index - 1] - time[index - 1 - SAMPLES_PER_RECORD])
        < QUATERNION_SAMPLE_PERIOD
    )


def identify_quaternion_outliers(
    l0r: L0RAttitude,
    qa: AncillaryQAThresholds | None = None,
) -> QuaternionBuffer:
    """Repair known quaternion telemetry anomalies and flag invalid samples.

    A sample is valid iff ``| |q| - 1 |`` is strictly below
    ``qa.quaternion_normalization_outlier_threshold``.

    Args:
        l0r: Raw quaternion samples.
        qa: Quality thresholds. Defaults to :class:`AncillaryQAThresholds`.

    Returns:
        QuaternionBuffer: Repaired samples, their validity, the sample
            count and whether a missing record was inserted.

    Examples:
        ```python
        from ancillax.telemetry import L0RAttitude, identify_quaternion_outliers
        buf = identify_quaternion_outliers(L0RAttitude(time=t, quaternion=q))
        buf.valid.sum(), buf.interpolate
        ```
    """
    if qa is None:
        qa = AncillaryQAThresholds()
    tolerance = qa.quaternion_normalization_outlier_threshold

    time_in = np.asarray(l0r.time, dtype=np.float64)
    quat_in = np.asarray(l0r.quaternion, dtype=np.float64)
    n = time_in.shape[0]

    if n % SAMPLES_PER_RECORD != 0:
        logger.warning(
            "Quaternion count %d is not a multiple of the %d-sample record size",
            n, SAMPLES_PER_RECORD,
        )

    capacity = n + SAMPLES_PER_RECORD
    time = np.zeros(capacity, dtype=np.float64)
    quaternion = np.zeros((capacity, 4), dtype=np.float64)
    valid = np.zeros(capacity, dtype=bool)

    interpolate = False
    index = 0
    for sample in range(n):
        time[index] = time_in[sample]
        quaternion[index] = quat_in[sample]

        if index >= SAMPLES_PER_RECORD:
            subfield = index % SAMPLES_PER_RECORD

            if subfield == 1 and _is_missing_record(time, index):
                if interpolate:
                    logger.warning(
                        "More than one missing quaternion record; gap at %.3f left unrepaired",
                        time[index - 1],
                    )
                else:
                    logger.warning(
                        "Missing quaternion record before %.3f; inserting %d blank samples",
                        time[index - 1], SAMPLES_PER_RECORD,
                    )
                    interpolate = True
                    shifted = index + SAMPLES_PER_RECORD
                    time[shifted - 1 : shifted + 1] = time[index - 1 : index + 1]
                    quaternion[shifted - 1 : shifted + 1] = quaternion[index - 1 : index + 1]
                    valid[shifted - 1] = valid[index - 1]
                    _blank(time, quaternion, valid, index - 1, shifted - 1)
                    index = shifted

            elif subfield == SAMPLES_PER_RECORD - 1:
                if _repeats_previous_record(time, index):
                    logger.warning(
                        "Duplicate quaternion samples at the end of the record ending %.3f",
                        time[index],
                    )
                    _blank(time, quaternion, valid, index - DUPLICATE_TAIL_SAMPLES + 1, index + 1)

                record_start = index - SAMPLES_PER_RECORD + 1
                if record_start >= SAMPLES_PER_RECORD and _repeats_previous_record(
                    time, record_start + 1
                ):
                    logger.warning(
                        "Duplicate quaternion samples at the start of the record at %.3f",
                        time[record_start],
                    )
                    _blank(
                        time, quaternion, valid,
                        record_start, record_start + DUPLICATE_HEAD_SAMPLES,
                    )

        magnitude = np.linalg.norm(quaternion[index])
        valid[index] = abs(magnitude - 1.0) < tolerance
        if not valid[index]:
            logger.debug("Invalid quaternion at %.3f, |q| = %.6f", time[index], magnitude)
        index += 1

    count = index
    logger.info(
        "Identified %d valid quaternions out of %d", int(valid[:count].sum()), count
    )
    return QuaternionBuffer(
        time=time[:count].copy(),
        quaternion=quaternion[:count].copy(),
        valid=valid[:count].copy(),
        count=count,
        interpolate=interpolate,
    )
