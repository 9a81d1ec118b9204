# SPDX-License-Identifier: MIT
"""Command-line interface for issuing, inspecting and decoding artwork tokens."""

from __future__ import annotations

import argparse
import asyncio
import inspect
import signal
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Any, Coroutine, Iterable, cast

import logfire
from pydantic_core import to_json

from codec.envelope import (
    check,
    detect_version,
    encode_params,
    is_encrypted_token,
    try_decode,
)
from core.seeding import create_seeded_random, generate_token, token_to_seed
from encryption.client import EncryptionClient, decode_secure, encode_secure
from errors import TokenError
from generation.generators import generate_params
from io_utils.loader import load_params_file, load_provenance_file
from io_utils.persistence import atomic_write, read_tokens
from models import ArtworkType, DecodeOutcome, Provenance, TokenVersion
from observability import telemetry
from observability.monitoring import init_logfire
from runtime.environment import RuntimeEnv
from runtime.settings import Settings, load_settings

LOG_LEVELS = ["fatal", "error", "warn", "notice", "info", "debug", "trace"]

TYPE_CHOICES = [kind.value for kind in ArtworkType.known()]
LOCAL_VERSIONS = [TokenVersion.V1.value, TokenVersion.V4.value]
TOKENS_HELP = "Tokens to process; combine with --input for batches"
INPUT_HELP = "File listing one token per line ('#' starts a comment)"


def _print_version() -> None:
    """Print the installed package version."""
    try:
        pkg_version = version("artwork-tokens")
    except PackageNotFoundError:  # pragma: no cover - fallback for editable installs
        pkg_version = "unknown"
    print(f"artwork-tokens {pkg_version}")


def _configure_logging(args: argparse.Namespace, settings: Settings) -> None:
    """Configure Logfire based on verbosity flags."""
    index = 2 + args.verbose - args.quiet
    index = max(0, min(len(LOG_LEVELS) - 1, index))
    init_logfire(settings.logfire_token, LOG_LEVELS[index])


def _emit(payload: Any) -> None:
    print(to_json(payload).decode("utf-8"))


def _fail(message: str) -> int:
    logfire.error(message)
    print(f"error: {message}", file=sys.stderr)
    return 1


def _collect_tokens(args: argparse.Namespace) -> list[str]:
    tokens = [token.strip() for token in args.tokens if token.strip()]
    if args.input:
        tokens.extend(read_tokens(Path(args.input)))
    return tokens


def _outcome_record(token: str, outcome: DecodeOutcome) -> dict[str, Any]:
    record: dict[str, Any] = {"token": token, "state": outcome.state}
    if outcome.ok and outcome.result is not None:
        record.update(outcome.result.model_dump(mode="json", exclude_none=True))
    else:
        record["reason"] = outcome.reason.value if outcome.reason else None
        record["message"] = outcome.message
    return record


def _load_provenance(path: str | None) -> Provenance | None:
    return load_provenance_file(path) if path else None


def _cmd_encode(args: argparse.Namespace, settings: Settings) -> int:
    """Issue a v1 or v4 token for a parameter file."""
    target = args.token_version or settings.default_version
    obfuscate = settings.obfuscate if args.obfuscate is None else args.obfuscate
    if target == TokenVersion.V4.value and args.obfuscate is None:
        obfuscate = False
    try:
        params = load_params_file(args.params)
        provenance = _load_provenance(args.provenance)
        token = encode_params(
            args.type,
            params,
            target,
            obfuscate=obfuscate,
            provenance=provenance,
            registry=RuntimeEnv.instance().registry,
        )
    except (OSError, RuntimeError, ValueError) as exc:
        return _fail(str(exc))
    print(token)
    return 0


async def _decode_one(
    token: str,
    expected: str | None,
    client: EncryptionClient | None,
) -> DecodeOutcome:
    registry = RuntimeEnv.instance().registry
    if client is None or not is_encrypted_token(token):
        return try_decode(token, expected, registry)
    try:
        result = await decode_secure(
            token, client, expected_type=expected, registry=registry
        )
    except TokenError as exc:
        return DecodeOutcome(state="rejected", reason=exc.reason, message=exc.message)
    return DecodeOutcome(state="decoded", result=result)


async def _decode_all(
    tokens: Iterable[str], expected: str | None, settings: Settings
) -> list[tuple[str, DecodeOutcome]]:
    tokens = list(tokens)
    if not any(is_encrypted_token(token) for token in tokens):
        return [(token, await _decode_one(token, expected, None)) for token in tokens]
    async with EncryptionClient.from_settings(settings) as client:
        return [
            (token, await _decode_one(token, expected, client)) for token in tokens
        ]


async def _cmd_decode(args: argparse.Namespace, settings: Settings) -> int:
    """Decode tokens and print one JSON record per token."""
    tokens = _collect_tokens(args)
    if not tokens:
        return _fail("No tokens given")
    with logfire.span("cli.decode", count=len(tokens)):
        results = await _decode_all(tokens, args.expect, settings)
    rejected = 0
    for token, outcome in results:
        if not outcome.ok:
            rejected += 1
        if args.params_only and outcome.ok and outcome.result is not None:
            _emit(outcome.result.params)
        else:
            _emit(_outcome_record(token, outcome))
    if rejected:
        logfire.warning("Tokens rejected", rejected=rejected, total=len(results))
    return 1 if rejected else 0


def _cmd_inspect(args: argparse.Namespace, settings: Settings) -> int:
    """Describe the structure of a token without decoding its payload."""
    try:
        info = detect_version(args.token)
    except TokenError as exc:
        return _fail(f"{exc.reason.value}: {exc.message}")
    _emit(
        {
            **info.model_dump(mode="json"),
            "encrypted": info.version.is_encrypted,
            "seed": token_to_seed(args.token.strip()),
        }
    )
    return 0


def _cmd_validate(args: argparse.Namespace, settings: Settings) -> int:
    """Run shape, type and checksum checks over tokens."""
    tokens = _collect_tokens(args)
    if not tokens:
        return _fail("No tokens given")
    failures = 0
    for token in tokens:
        try:
            info = check(token, args.expect)
        except TokenError as exc:
            failures += 1
            print(f"FAIL {token} {exc.reason.value}: {exc.message}")
            continue
        print(f"OK {token} {info.type.value} {info.version.value}")
    return 1 if failures else 0


def _cmd_seed(args: argparse.Namespace, settings: Settings) -> int:
    """Print the seed of a token and the first values of its generator."""
    token = args.token.strip()
    rand = create_seeded_random(token)
    _emit(
        {
            "token": token,
            "seed": token_to_seed(token),
            "randoms": [rand() for _ in range(args.count)],
        }
    )
    return 0


def _cmd_generate(args: argparse.Namespace, settings: Settings) -> int:
    """Draw parameter sets from legacy seed tokens."""
    if args.token and args.count != 1:
        return _fail("--token draws exactly one parameter set")
    tokens = [args.token] if args.token else [
        generate_token(args.type) for _ in range(args.count)
    ]
    registry = RuntimeEnv.instance().registry
    lines: list[str] = []
    try:
        for token in tokens:
            params = {**generate_params(args.type, token), "token": token}
            if args.encode:
                lines.append(
                    encode_params(args.type, params, args.encode, registry=registry)
                )
            else:
                lines.append(to_json(params).decode("utf-8"))
    except (TokenError, ValueError) as exc:
        return _fail(str(exc))
    if args.output:
        atomic_write(Path(args.output), lines)
        logfire.info("Wrote generated output", path=args.output, count=len(lines))
    else:
        for line in lines:
            print(line)
    return 0


async def _cmd_encrypt(args: argparse.Namespace, settings: Settings) -> int:
    """Issue an encrypted v2e token through the encryption service."""
    try:
        params = load_params_file(args.params)
        provenance = _load_provenance(args.provenance)
        async with EncryptionClient.from_settings(settings) as client:
            token = await encode_secure(
                args.type,
                params,
                client,
                provenance=provenance,
                registry=RuntimeEnv.instance().registry,
            )
    except TokenError as exc:
        return _fail(f"{exc.reason.value}: {exc.message}")
    except (OSError, RuntimeError, ValueError) as exc:
        return _fail(str(exc))
    print(token)
    return 0


async def _cmd_decrypt(args: argparse.Namespace, settings: Settings) -> int:
    """Decode a token, asking the service to open encrypted ones."""
    try:
        async with EncryptionClient.from_settings(settings) as client:
            result = await decode_secure(
                args.token,
                client,
                expected_type=args.expect,
                registry=RuntimeEnv.instance().registry,
            )
    except TokenError as exc:
        return _fail(f"{exc.reason.value}: {exc.message}")
    _emit(result.model_dump(mode="json", exclude_none=True))
    return 0


def _add_common_args(parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
    """Add CLI options shared across subcommands."""
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML configuration file",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity (repeatable)",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="count",
        default=0,
        help="Decrease logging verbosity (repeatable)",
    )
    return parser


def _add_subparser(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    common: argparse.ArgumentParser,
    name: str,
    help_text: str,
) -> argparse.ArgumentParser:
    return subparsers.add_parser(
        name,
        parents=[common],
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        help=help_text,
        description=help_text,
    )


def _add_encode_subparser(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    common: argparse.ArgumentParser,
) -> None:
    parser = _add_subparser(
        subparsers, common, "encode", "Encode a parameter file into a token"
    )
    parser.add_argument("--type", required=True, choices=TYPE_CHOICES)
    parser.add_argument(
        "--params", required=True, help="JSON or YAML file holding the parameters"
    )
    parser.add_argument(
        "--version",
        dest="token_version",
        choices=LOCAL_VERSIONS,
        default=None,
        help="Token format; defaults to default_version from the configuration",
    )
    parser.add_argument(
        "--obfuscate",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Apply the ENC: layer to v1 payloads",
    )
    parser.add_argument(
        "--provenance", default=None, help="JSON or YAML provenance file (v4 only)"
    )
    parser.set_defaults(func=_cmd_encode)


def _add_decode_subparser(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    common: argparse.ArgumentParser,
) -> None:
    parser = _add_subparser(
        subparsers, common, "decode", "Decode tokens into parameter sets"
    )
    parser.add_argument("tokens", nargs="*", help=TOKENS_HELP)
    parser.add_argument("--input", default=None, help=INPUT_HELP)
    parser.add_argument(
        "--expect", choices=TYPE_CHOICES, default=None, help="Required artwork type"
    )
    parser.add_argument(
        "--params-only",
        action="store_true",
        help="Print only the parameter set of decoded tokens",
    )
    parser.set_defaults(func=_cmd_decode)


def _add_inspect_subparser(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    common: argparse.ArgumentParser,
) -> None:
    parser = _add_subparser(
        subparsers, common, "inspect", "Show the structure of a token"
    )
    parser.add_argument("token")
    parser.set_defaults(func=_cmd_inspect)


def _add_validate_subparser(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    common: argparse.ArgumentParser,
) -> None:
    parser = _add_subparser(
        subparsers, common, "validate", "Check token shape, type and checksum"
    )
    parser.add_argument("tokens", nargs="*", help=TOKENS_HELP)
    parser.add_argument("--input", default=None, help=INPUT_HELP)
    parser.add_argument(
        "--expect", choices=TYPE_CHOICES, default=None, help="Required artwork type"
    )
    parser.set_defaults(func=_cmd_validate)


def _add_seed_subparser(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    common: argparse.ArgumentParser,
) -> None:
    parser = _add_subparser(
        subparsers, common, "seed", "Show the deterministic seed of a token"
    )
    parser.add_argument("token")
    parser.add_argument(
        "--count", type=int, default=5, help="Number of random values to print"
    )
    parser.set_defaults(func=_cmd_seed)


def _add_generate_subparser(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    common: argparse.ArgumentParser,
) -> None:
    parser = _add_subparser(
        subparsers, common, "generate", "Generate parameters from seed tokens"
    )
    parser.add_argument("--type", required=True, choices=TYPE_CHOICES)
    parser.add_argument(
        "--token", default=None, help="Seed token; a fresh one is drawn if omitted"
    )
    parser.add_argument("--count", type=int, default=1, help="Parameter sets to draw")
    parser.add_argument(
        "--encode",
        choices=LOCAL_VERSIONS,
        default=None,
        help="Print encoded tokens instead of JSON parameter sets",
    )
    parser.add_argument(
        "--output", default=None, help="Write results to this file instead"
    )
    parser.set_defaults(func=_cmd_generate)


def _add_encrypt_subparser(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    common: argparse.ArgumentParser,
) -> None:
    parser = _add_subparser(
        subparsers, common, "encrypt", "Issue an encrypted token via the service"
    )
    parser.add_argument("--type", required=True, choices=TYPE_CHOICES)
    parser.add_argument(
        "--params", required=True, help="JSON or YAML file holding the parameters"
    )
    parser.add_argument("--provenance", default=None, help="Provenance file")
    parser.set_defaults(func=_cmd_encrypt)


def _add_decrypt_subparser(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    common: argparse.ArgumentParser,
) -> None:
    parser = _add_subparser(
        subparsers, common, "decrypt", "Decode a token using the decryption service"
    )
    parser.add_argument("token")
    parser.add_argument(
        "--expect", choices=TYPE_CHOICES, default=None, help="Required artwork type"
    )
    parser.set_defaults(func=_cmd_decrypt)


def _build_parser() -> argparse.ArgumentParser:
    """Return an argument parser configured with subcommands."""
    parser = argparse.ArgumentParser(
        description=(
            "Encode, decode and validate self-describing artwork tokens. Tokens "
            "carry either a seed, a positional v1 payload, a compressed v4 "
            "payload or an encrypted v2e payload."
        ),
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print the artwork-tokens version and exit.",
    )
    common = _add_common_args(
        argparse.ArgumentParser(
            add_help=False, formatter_class=argparse.ArgumentDefaultsHelpFormatter
        )
    )
    subparsers = parser.add_subparsers(dest="command")
    _add_encode_subparser(subparsers, common)
    _add_decode_subparser(subparsers, common)
    _add_inspect_subparser(subparsers, common)
    _add_validate_subparser(subparsers, common)
    _add_seed_subparser(subparsers, common)
    _add_generate_subparser(subparsers, common)
    _add_encrypt_subparser(subparsers, common)
    _add_decrypt_subparser(subparsers, common)
    return parser


def _run_async_with_signals(coro: Coroutine[Any, Any, Any]) -> Any:
    """Execute ``coro`` and cancel on SIGINT or SIGTERM.

    Args:
        coro: Coroutine to run.

    Returns:
        Result of the coroutine.

    Raises:
        asyncio.CancelledError: Propagated when a termination signal is received.
    """

    async def _runner() -> Any:
        loop = asyncio.get_running_loop()
        task = asyncio.create_task(coro)
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, task.cancel)
        try:
            return await task
        finally:
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.remove_signal_handler(sig)

    return asyncio.run(_runner())


def _execute_subcommand(args: argparse.Namespace, settings: Settings) -> None:
    """Initialise runtime and dispatch to the chosen subcommand."""
    RuntimeEnv.initialize(settings)
    _configure_logging(args, settings)
    telemetry.reset()
    code = 0
    try:
        result = args.func(args, settings)
        if inspect.isawaitable(result):
            result = _run_async_with_signals(cast(Coroutine[Any, Any, Any], result))
        code = int(result or 0)
    finally:
        if args.verbose:
            telemetry.print_summary(sys.stderr)
        logfire.force_flush()
    if code:
        raise SystemExit(code)


def main() -> None:
    """Parse arguments and dispatch to the requested subcommand."""
    parser = _build_parser()
    args = parser.parse_args()
    if args.version:
        _print_version()
        return
    if args.command is None:
        parser.print_help()
        raise SystemExit(1)
    settings = load_settings(args.config)
    _execute_subcommand(args, settings)


if __name__ == "__main__":
    # Allow module to be executed as a standalone script
    main()
