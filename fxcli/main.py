"""
fxcli - convert an amount between two currency/asset symbols.

    fxcli <amount> <from> <to>

Exit codes: 0 on success, 130 when interrupted or the exchange deadline
expires, 1 for any other error.
"""

import asyncio
import logging
import math
import signal
import sys
from collections.abc import Sequence
from decimal import Decimal
from typing import Protocol, TextIO

from pydantic import ValidationError

from fxcli.core.config import Settings, get_settings
from fxcli.schemas.exchange import ExchangeRequest
from fxcli.services.cmc_client import CmcClient, CmcClientError

logger = logging.getLogger(__name__)

# Constants
EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CANCELLED = 130  # same as SIGINT
EXCHANGE_TIMEOUT = 3.0  # seconds
USAGE = "usage: fxcli <amount> <from> <to>"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

CANCELLATION_ERRORS = (asyncio.CancelledError, asyncio.TimeoutError, TimeoutError)
ABORT_ERRORS = CANCELLATION_ERRORS + (KeyboardInterrupt,)


class Exchanger(Protocol):
    """Anything that can convert an ExchangeRequest into a price"""

    async def exchange(self, request: ExchangeRequest) -> float: ...


class FxCliError(Exception):
    """Base exception for the command"""
    pass


class UsageError(FxCliError):
    """Wrong number of arguments"""
    pass


class AmountParseError(FxCliError):
    """Amount is not a number"""
    pass


class InputValidationError(FxCliError):
    """Arguments parsed but are not acceptable"""
    pass


class AmountValidationError(InputValidationError):
    """Amount is zero or negative"""
    pass


class ExchangeRateError(FxCliError):
    """Exchange call failed; the original error is kept as __cause__"""
    pass


class ConfigurationError(FxCliError):
    """Client could not be created from the settings"""
    pass


def is_cancellation(exc: BaseException) -> bool:
    """True if exc means the call was cancelled or ran out of time"""
    return isinstance(exc, CANCELLATION_ERRORS)


def format_number(value: float) -> str:
    """
    Shortest form of a float, in %g style.

    Exponent notation below 1e-4 and from 1e6 up (1e+06, 1.5e-07);
    plain digits otherwise, with integral values dropping the trailing .0.
    """
    text = repr(value)
    if value == 0 or not math.isfinite(value):
        return text[:-2] if text.endswith(".0") else text

    number = Decimal(text)
    exponent = number.adjusted()
    if -4 <= exponent < 6:
        return text[:-2] if text.endswith(".0") else text

    sign, digits, _ = number.as_tuple()
    digits = "".join(map(str, digits)).rstrip("0")
    mantissa = digits[0] + (f".{digits[1:]}" if len(digits) > 1 else "")
    return f"{'-' if sign else ''}{mantissa}e{exponent:+03d}"


# =============================================================================
# Command
# =============================================================================


async def execute(
    args: Sequence[str],
    exchanger: Exchanger,
    out: TextIO,
    *,
    timeout: float = EXCHANGE_TIMEOUT,
) -> None:
    """
    Parse arguments, run one exchange and print the result.

    Args:
        args: positional arguments <amount> <from> <to>
        exchanger: service performing the conversion
        out: stream receiving the announcement and result lines
        timeout: deadline in seconds for the exchange call

    Raises:
        UsageError, AmountParseError, InputValidationError: bad arguments,
            raised before the exchanger is called
        ExchangeRateError: exchange failed, cause attached
        asyncio.CancelledError, TimeoutError: passed through unwrapped
    """
    if len(args) != 3:
        raise UsageError(USAGE)

    raw_amount, from_symbol, to_symbol = args

    try:
        amount = float(raw_amount)
    except ValueError as e:
        raise AmountParseError(f"error parsing amount: {e}") from e
    if not math.isfinite(amount):
        raise AmountParseError(f"error parsing amount: {raw_amount!r} is not a finite number")

    if amount <= 0:
        raise AmountValidationError(f"amount cannot be negative or zero: {amount:.2f}")
    if not from_symbol or not to_symbol:
        raise InputValidationError("symbols cannot be empty")

    request = ExchangeRequest(amount=amount, from_symbol=from_symbol, to_symbol=to_symbol)

    print(
        "Exchange", format_number(request.amount), request.from_symbol,
        "to", request.to_symbol,
        file=out,
    )

    try:
        result = await asyncio.wait_for(exchanger.exchange(request), timeout)
    except Exception as e:
        if is_cancellation(e):
            raise
        raise ExchangeRateError(f"cannot get exchange rate: {e}") from e

    print("You received", format_number(result), request.to_symbol, file=out)


# =============================================================================
# Process wiring
# =============================================================================


def _install_signal_handlers(loop: asyncio.AbstractEventLoop, task: asyncio.Task) -> list[int]:
    """Cancel task on SIGINT/SIGTERM. Returns the signals actually handled."""
    installed = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, task.cancel)
        except (NotImplementedError, RuntimeError):
            # Windows event loops and non-main threads
            logger.debug(f"Signal handler for {sig!r} not installed")
            continue
        installed.append(sig)
    return installed


async def run(
    args: Sequence[str],
    out: TextIO,
    settings: Settings | None = None,
) -> None:
    """Create the CoinMarketCap client and execute the command with it"""
    if settings is None:
        settings = get_settings()

    if not settings.cmc_api_key:
        raise ConfigurationError("cannot create fx client: missing API key (set FXCLI_CMC_API_KEY)")

    try:
        client = CmcClient(
            settings.cmc_base_url,
            settings.cmc_api_key,
            timeout=settings.http_timeout_seconds,
        )
    except CmcClientError as e:
        raise ConfigurationError(f"cannot create fx client: {e}") from e

    loop = asyncio.get_running_loop()
    installed = _install_signal_handlers(loop, asyncio.current_task())
    try:
        async with client:
            await execute(args, client, out, timeout=settings.exchange_timeout_seconds)
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), logging.WARNING)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command and return the process exit code"""
    args = sys.argv[1:] if argv is None else list(argv)

    try:
        settings = get_settings()
    except ValidationError as e:
        _configure_logging("WARNING")
        logger.error(f"invalid configuration: {e}")
        return EXIT_FAILURE

    _configure_logging(settings.log_level)
    logger.debug(f"{settings.app_name} {settings.app_version} starting")

    try:
        asyncio.run(run(args, sys.stdout, settings))
    except ABORT_ERRORS as e:
        logger.debug(f"Exchange aborted: {e!r}")
        return EXIT_CANCELLED
    except FxCliError as e:
        logger.error(str(e))
        return EXIT_FAILURE

    return EXIT_OK


def cli() -> None:
    """Console script entry point"""
    sys.exit(main())
