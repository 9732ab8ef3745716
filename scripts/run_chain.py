#!/usr/bin/env python3
"""
Gift chain runner

Usage:
  python scripts/run_chain.py run [--total <cents>] [--cart-file <path>] [--latency-sec <sec>]
  python scripts/run_chain.py run --total <cents> --api-base-url <url>
  python scripts/run_chain.py result --api-base-url <url>
  python scripts/run_chain.py logs --run-id <id> --api-base-url <url> [--event <name>]

Exit codes: 0 committed, 2 stopped (result unchanged), 1 error.

Examples:
  python scripts/run_chain.py run --total 12000
  python scripts/run_chain.py run --total 5000 --api-base-url http://localhost:8000
"""
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

import requests
from dotenv import load_dotenv
from loguru import logger

load_dotenv()

from application.exceptions import ApplicationError
from application.steps.gift_chain import build_gift_chain
from domain.cart import Cart
from domain.exceptions import DomainError, ValidationError
from infrastructure.cart.mock_cart_service import InMemoryCartService, create_mock_cart
from infrastructure.config.env_settings import (
    load_cart_latency_sec,
    load_gift_chain_settings,
    load_log_level,
)
from infrastructure.logging.console_logger import ConsoleLogger
from infrastructure.logging.log_setup import setup_console_logging

DEFAULT_TOTAL_PRICE = 12000
DEFAULT_API_TIMEOUT_SEC = 30
EXIT_COMMITTED = 0
EXIT_ERROR = 1
EXIT_STOPPED = 2


def _load_cart_file(path: str) -> Cart:
    try:
        content = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ValueError(f"Unable to read cart file: {exc}") from exc
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON for cart: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError("cart must be a JSON object")
    try:
        return Cart.from_dict(data)
    except ValidationError as exc:
        raise ValueError(str(exc)) from exc


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Gift chain runner")
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Run the gift chain locally or via API")
    run_parser.add_argument("--total", type=int)
    run_parser.add_argument("--cart-file", type=str)
    run_parser.add_argument("--latency-sec", type=float)
    run_parser.add_argument("--api-base-url", type=str)

    result_parser = subparsers.add_parser("result", help="Fetch the committed chain result")
    result_parser.add_argument("--api-base-url", type=str, required=True)

    logs_parser = subparsers.add_parser("logs", help="Fetch run logs")
    logs_parser.add_argument("--run-id", type=str, required=True)
    logs_parser.add_argument("--api-base-url", type=str, required=True)
    logs_parser.add_argument("--event", type=str)

    return parser


async def _run_local(args: argparse.Namespace) -> int:
    if args.cart_file:
        cart = _load_cart_file(args.cart_file)
    else:
        cart = create_mock_cart(args.total if args.total is not None else DEFAULT_TOTAL_PRICE)

    latency = args.latency_sec if args.latency_sec is not None else load_cart_latency_sec()
    service = InMemoryCartService(latency_sec=latency)
    service.put_cart(cart)

    executor = build_gift_chain(
        service,
        load_gift_chain_settings(),
        ConsoleLogger(level=load_log_level()),
    )

    initial = await service.fetch_cart(cart.token)
    logger.info("Starting chain execution: total_price={}", initial.total_price)
    result = await executor.run(initial)

    print("\n=== Result ===")
    print(f"Run ID: {result.run_id}")
    print(f"Status: {result.status.value}")
    if not result.committed:
        logger.warning("Chain stopped at {}: {}", result.stopped_step, result.stop_reason)
        return EXIT_STOPPED

    logger.info("Chain execution completed")
    committed = executor.get_result()
    print(f"Cart: {json.dumps(committed.to_dict(), indent=2, ensure_ascii=False)}")
    return EXIT_COMMITTED


def _run_api(args: argparse.Namespace) -> int:
    if args.cart_file:
        payload = {"cart": _load_cart_file(args.cart_file).to_dict()}
    else:
        payload = {"total_price": args.total if args.total is not None else DEFAULT_TOTAL_PRICE}
    url = f"{args.api_base_url.rstrip('/')}/chains/gift/runs"
    response = requests.post(url, json=payload, timeout=DEFAULT_API_TIMEOUT_SEC)
    print(f"Status: {response.status_code}")
    data = response.json()
    print(json.dumps(data, indent=2, ensure_ascii=False))
    if response.status_code >= 400 or not data.get("success"):
        return EXIT_ERROR
    return EXIT_COMMITTED if data.get("committed") else EXIT_STOPPED


def _get_json(url: str, params: dict | None = None) -> dict | list:
    response = requests.get(url, params=params, timeout=DEFAULT_API_TIMEOUT_SEC)
    response.raise_for_status()
    return response.json()


def _result_api(args: argparse.Namespace) -> int:
    data = _get_json(f"{args.api_base_url.rstrip('/')}/chains/gift/result")
    print(json.dumps(data, indent=2, ensure_ascii=False))
    return EXIT_COMMITTED


def _logs_api(args: argparse.Namespace) -> int:
    params = {"event": args.event} if args.event else None
    data = _get_json(f"{args.api_base_url.rstrip('/')}/runs/{args.run_id}/logs", params=params)
    print(json.dumps(data, indent=2, ensure_ascii=False))
    return EXIT_COMMITTED


def main() -> None:
    setup_console_logging(level=load_log_level())
    parser = _build_parser()
    args = parser.parse_args(sys.argv[1:])

    if not args.command:
        parser.print_help()
        sys.exit(EXIT_ERROR)

    try:
        if args.command == "run":
            if args.api_base_url:
                exit_code = _run_api(args)
            else:
                exit_code = asyncio.run(_run_local(args))
        elif args.command == "result":
            exit_code = _result_api(args)
        elif args.command == "logs":
            exit_code = _logs_api(args)
        else:
            raise ValueError(f"Unknown command: {args.command}")
    except ValueError as exc:
        print(f"ERROR: {exc}")
        sys.exit(EXIT_ERROR)
    except (ApplicationError, DomainError) as exc:
        print(f"ERROR: {exc}")
        sys.exit(EXIT_ERROR)
    except requests.RequestException as exc:
        print(f"ERROR: API request failed: {exc}")
        sys.exit(EXIT_ERROR)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
