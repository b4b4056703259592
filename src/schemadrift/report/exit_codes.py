"""Translate run outcomes into process exit codes.

    0  no drift
    1  drift detected, or some checks could not be evaluated
    2  fatal: the run produced no report (bad schema, unreachable source)

Keeping 1 and 2 apart lets automation tell "validation failed" from
"could not validate".
"""

from __future__ import annotations

from enum import IntEnum

from ..checks.models import CheckStatus
from ..errors import FatalError
from .models import Report


class ExitStatus(IntEnum):
    OK = 0
    DRIFT = 1
    FATAL = 2


def exit_code(report: Report | None) -> ExitStatus:
    """Exit code for a finished run; ``None`` means no report was produced."""
    if report is None:
        return ExitStatus.FATAL
    if report.status == CheckStatus.PASS:
        return ExitStatus.OK
    return ExitStatus.DRIFT


def exit_code_for_error(error: BaseException) -> ExitStatus:
    """Exit code for a run that ended in an exception instead of a report.

    Fatal errors (bad schema, unreachable source) and invalid arguments map
    to ``FATAL``. Anything else is a bug and is re-raised.
    """
    if isinstance(error, (FatalError, ValueError)):
        return ExitStatus.FATAL
    raise error
