from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any

from inspectreport.config import get_settings
from inspectreport.matching import score, suggest_client
from inspectreport.report.builder import REPORT_STYLES
from inspectreport.report.layout import DocumentGenerationError
from inspectreport.runner import run_export
from inspectreport.types import Client


def _print_json(payload: dict) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _load_json(path_arg: str) -> tuple[Any, str | None]:
    path = Path(path_arg).expanduser().resolve()
    if not path.exists() or not path.is_file():
        return None, f'Input not found: {path}'
    try:
        return json.loads(path.read_text(encoding='utf-8')), None
    except json.JSONDecodeError as exc:
        return None, f'Input is not valid JSON: {path}: {exc}'


def _export(kind: str, args: argparse.Namespace, **kwargs: Any) -> int:
    payload, error = _load_json(args.input)
    if error is not None:
        _print_json({'status': 'error', 'message': error})
        return 2
    if not isinstance(payload, dict):
        _print_json({'status': 'error', 'message': 'Input must be a JSON object'})
        return 2

    output_dir = Path(args.output_dir).expanduser() if args.output_dir else None
    try:
        result = run_export(kind, payload, output_dir=output_dir, **kwargs)
    except DocumentGenerationError as exc:
        _print_json({'status': 'error', 'section': exc.section, 'message': exc.message})
        return 2

    _print_json({'status': 'ok', **result.model_dump(mode='json')})
    return 0


def cmd_inspection(args: argparse.Namespace) -> int:
    return _export('inspection', args, style=args.style)


def cmd_invoice(args: argparse.Namespace) -> int:
    return _export('invoice', args)


def cmd_match_client(args: argparse.Namespace) -> int:
    payload, error = _load_json(args.clients)
    if error is not None:
        _print_json({'status': 'error', 'message': error})
        return 2
    if not isinstance(payload, list):
        _print_json({'status': 'error', 'message': 'Clients file must hold a JSON list'})
        return 2

    clients = [Client.model_validate(row) for row in payload if isinstance(row, dict)]
    match = suggest_client(clients, args.name, args.location, threshold=args.threshold)
    if match is None:
        _print_json({'status': 'no_match', 'name': args.name})
        return 0
    _print_json(
        {
            'status': 'ok',
            'client': match.model_dump(mode='json'),
            'score': round(score(match.name, args.name), 3),
        }
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Bilingual inspection report and invoice PDF exporter')
    sub = parser.add_subparsers(dest='command', required=True)

    inspection = sub.add_parser('inspection', help='Export an inspection report PDF')
    inspection.add_argument('--input', required=True, help='Path to inspection JSON')
    inspection.add_argument('--style', choices=sorted(REPORT_STYLES), default='standard')
    inspection.add_argument('--output-dir', required=False, help='Directory for the exported PDF')
    inspection.set_defaults(func=cmd_inspection)

    invoice = sub.add_parser('invoice', help='Export an invoice PDF')
    invoice.add_argument('--input', required=True, help='Path to invoice JSON')
    invoice.add_argument('--output-dir', required=False, help='Directory for the exported PDF')
    invoice.set_defaults(func=cmd_invoice)

    match = sub.add_parser('match-client', help='Find the closest known client by name')
    match.add_argument('--clients', required=True, help='Path to clients JSON list')
    match.add_argument('--name', required=True, help='Client name to look up')
    match.add_argument('--location', required=False, help='Property location fallback')
    match.add_argument('--threshold', type=float, default=0.6)
    match.set_defaults(func=cmd_match_client)

    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    parser = build_parser()
    args = parser.parse_args(argv)
    return int(args.func(args))


if __name__ == '__main__':
    raise SystemExit(main())
