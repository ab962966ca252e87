"""Command line surface and config file loading.

Parses the process arguments, optionally reads a JSON config file and merges
the two into a :class:`~tuic_server.models.RawConfig` whose required fields
are all populated. Values given on the command line take precedence over the
file; the file takes precedence over built-in defaults.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Any, TypeVar

import click
from pydantic import ValidationError

from tuic_server.models import CongestionController, LogLevel, RawConfig
from tuic_server.utils.exceptions import (
    ArgumentParseError,
    ConfigFileParseError,
    ConfigIOError,
    HelpRequested,
    IntegerParseError,
    MissingOptionError,
    UnexpectedArgumentsError,
    VersionRequested,
)
from tuic_server.utils.logging_config import get_logger
from tuic_server.utils.version import get_version

logger = get_logger(__name__)

PROG_NAME = "tuic-server"

T = TypeVar("T")

_UNSIGNED_RE = re.compile(r"\+?[0-9]+")


def build_command() -> click.Command:
    """Declare the command line options.

    Every value option is read as a plain string; conversion happens after
    the file has been merged so that each failure maps onto a specific
    error type.
    """
    params = [
        click.Option(
            ["-c", "--config"],
            metavar="CONFIG_FILE",
            help=(
                "Read configuration from a file. Note that command line "
                "arguments will override the configuration file"
            ),
        ),
        click.Option(
            ["--port"], metavar="SERVER_PORT", help="Set the server listening port"
        ),
        click.Option(
            ["--token"], metavar="TOKEN", help="Set the token for TUIC authentication"
        ),
        click.Option(
            ["--certificate"],
            metavar="CERTIFICATE",
            help="Set the X.509 certificate. This must be an end-entity certificate",
        ),
        click.Option(
            ["--private-key"],
            metavar="PRIVATE_KEY",
            help="Set the certificate private key",
        ),
        click.Option(
            ["--congestion-controller"],
            metavar="CONGESTION_CONTROLLER",
            help=(
                'Set the congestion control algorithm. Available: "cubic", '
                '"new_reno", "bbr". Default: "cubic"'
            ),
        ),
        click.Option(
            ["--max-idle-time"],
            metavar="MAX_IDLE_TIME",
            help=(
                "Set the maximum idle time for connections, in milliseconds. "
                "The true idle timeout is the minimum of this and the "
                "client's one. Default: 15000"
            ),
        ),
        click.Option(
            ["--authentication-timeout"],
            metavar="AUTHENTICATION_TIMEOUT",
            help=(
                "Set the maximum time allowed between a QUIC connection "
                "established and the TUIC authentication packet received, in "
                "milliseconds. Default: 1000"
            ),
        ),
        click.Option(
            ["--max-udp-packet-size"],
            metavar="MAX_UDP_PACKET_SIZE",
            help=(
                "Set the maximum UDP packet size, in bytes. Excess bytes may "
                "be discarded. Default: 1536"
            ),
        ),
        click.Option(["--enable-ipv6"], is_flag=True, help="Enable IPv6 support"),
        click.Option(
            ["--log-level"],
            metavar="LOG_LEVEL",
            help=(
                'Set the log level. Available: "off", "error", "warn", "info", '
                '"debug", "trace". Default: "info"'
            ),
        ),
        click.Option(["-v", "--version"], is_flag=True, help="Print the version"),
        click.Option(["-h", "--help"], is_flag=True, help="Print this help menu"),
    ]
    return click.Command(
        PROG_NAME,
        params=params,
        add_help_option=False,
        context_settings={"allow_extra_args": True},
    )


def render_usage(command: click.Command | None = None) -> str:
    """Render the full usage text."""
    command = command or build_command()
    return command.get_help(click.Context(command, info_name=PROG_NAME))


def parse_unsigned(option: str, text: str, bits: int) -> int:
    """Parse a decimal unsigned integer that must fit in ``bits`` bits.

    Raises:
        IntegerParseError: If ``text`` is empty, not decimal, or out of range

    """
    if not text:
        raise IntegerParseError(option, text, "cannot parse integer from empty string")
    if not _UNSIGNED_RE.fullmatch(text):
        raise IntegerParseError(option, text, "invalid digit found in string")

    value = int(text)
    if value > 2**bits - 1:
        raise IntegerParseError(
            option, text, f"number too large to fit in target type (max {2**bits - 1})"
        )
    return value


def resolve_required(option: str, cli_value: T | None, file_value: T | None) -> T:
    """Return the CLI value, else the file value.

    Raises:
        MissingOptionError: If neither source supplied the option

    """
    if cli_value is not None:
        return cli_value
    if file_value is not None:
        return file_value
    raise MissingOptionError(option)


def resolve_optional(cli_value: T | None, file_value: T | None, default: T) -> T:
    """Return the CLI value, else the file value, else ``default``."""
    if cli_value is not None:
        return cli_value
    if file_value is not None:
        return file_value
    return default


def load_config_file(path: str) -> RawConfig:
    """Read and validate a JSON config file.

    Raises:
        ConfigIOError: If the file cannot be read
        ConfigFileParseError: If the content is not valid JSON or does not
            match the config schema

    """
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise ConfigIOError(path, e) from e

    try:
        raw = RawConfig.model_validate_json(data)
    except ValidationError as e:
        raise ConfigFileParseError(describe_validation_error(e)) from e

    logger.debug("Loaded config file %s", path)
    return raw


def describe_validation_error(error: ValidationError) -> str:
    """Describe the first problem in a pydantic validation error."""
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    if location:
        return f"{location}: {first['msg']}"
    return first["msg"]


def _reject_non_utf8(args: Sequence[str]) -> None:
    # Undecodable argv bytes arrive as lone surrogates
    for arg in args:
        try:
            arg.encode("utf-8")
        except UnicodeEncodeError as e:
            raise ArgumentParseError(f"Argument {arg!r} is not valid UTF-8") from e


def _reject_duplicates(command: click.Command, args: Sequence[str]) -> None:
    """Fail if any option occurs more than once, under any of its names."""
    by_name = {name: param for param in command.params for name in param.opts}
    seen: set[str] = set()

    tokens = iter(args)
    for token in tokens:
        if token == "--":
            break
        if token.startswith("--"):
            name, sep, _ = token.partition("=")
            has_value = bool(sep)
        elif token.startswith("-") and len(token) > 1:
            name, has_value = token[:2], len(token) > 2
        else:
            continue

        param = by_name.get(name)
        if param is None:
            continue
        if param.name in seen:
            raise ArgumentParseError(f"Option '{param.opts[-1]}' given more than once.")
        seen.add(param.name)

        # Consume a separate value so it is never read as an option name
        if not param.is_flag and not has_value:
            next(tokens, None)


def _parse_command_line(args: Sequence[str]) -> tuple[click.Command, click.Context]:
    _reject_non_utf8(args)
    command = build_command()
    try:
        context = command.make_context(PROG_NAME, list(args))
    except click.ClickException as e:
        raise ArgumentParseError(e.format_message()) from e
    _reject_duplicates(command, args)
    return command, context


def _convert(text: str | None, parser) -> Any:
    if text is None:
        return None
    return parser(text)


def _field_default(name: str) -> Any:
    return RawConfig.model_fields[name].default


def parse_raw_config(args: Sequence[str]) -> RawConfig:
    """Parse process arguments (without the program name) into a RawConfig.

    The returned record always has ``port``, ``token``, ``certificate`` and
    ``private_key`` set.

    Raises:
        HelpRequested: If ``-h``/``--help`` was given
        VersionRequested: If ``-v``/``--version`` was given
        ConfigError: Any other subclass, for the first problem found

    """
    command, context = _parse_command_line(args)
    opts = context.params

    if opts["help"]:
        raise HelpRequested(render_usage(command))

    if opts["version"]:
        raise VersionRequested(get_version())

    if context.args:
        raise UnexpectedArgumentsError(context.args)

    file_raw = load_config_file(opts["config"]) if opts["config"] is not None else None

    def from_file(name: str) -> Any:
        return getattr(file_raw, name) if file_raw is not None else None

    # A malformed --port is reported even when the file has a port
    cli_port = _convert(opts["port"], lambda v: parse_unsigned("port", v, 16))

    values: dict[str, Any] = {
        "port": resolve_required("port", cli_port, from_file("port")),
        "token": resolve_required("token", opts["token"], from_file("token")),
        "certificate": resolve_required(
            "certificate", opts["certificate"], from_file("certificate")
        ),
        "private_key": resolve_required(
            "private-key", opts["private_key"], from_file("private_key")
        ),
    }

    cli_values: dict[str, Any] = {
        "congestion_controller": _convert(
            opts["congestion_controller"], CongestionController.parse
        ),
        "max_idle_time": _convert(
            opts["max_idle_time"], lambda v: parse_unsigned("max-idle-time", v, 32)
        ),
        "authentication_timeout": _convert(
            opts["authentication_timeout"],
            lambda v: parse_unsigned("authentication-timeout", v, 64),
        ),
        "max_udp_packet_size": _convert(
            opts["max_udp_packet_size"],
            lambda v: parse_unsigned("max-udp-packet-size", v, 64),
        ),
        "log_level": _convert(opts["log_level"], LogLevel.parse),
    }
    for name, cli_value in cli_values.items():
        values[name] = resolve_optional(
            cli_value, from_file(name), _field_default(name)
        )

    # The flag can only switch IPv6 on
    values["enable_ipv6"] = (
        resolve_optional(None, from_file("enable_ipv6"), _field_default("enable_ipv6"))
        or bool(opts["enable_ipv6"])
    )

    return RawConfig.model_construct(**values)


