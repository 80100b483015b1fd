#!/usr/bin/env python
"""
Gacha analyzer runner: import (UIGF JSON or CSV) → analysis → report
"""
import argparse
import json
import logging
import sys
from datetime import datetime

from gacha.config import get_settings
from gacha.errors import GachaError, MalformedContainer
from gacha.game_schemas import build_default_registry
from gacha.report import build_reports
from gacha.tabular import read_csv, write_csv
from gacha.uigf_codec import (
    detect_version,
    dump_container,
    export_container,
    export_filename,
    flatten,
    import_container,
    is_legacy,
    load_container,
    migrate_legacy,
    validate_container,
)
from gacha.up_history import load_up_history


def load_records(path, registry, game=None):
    """Canonical records from a UIGF document or a CSV sheet."""
    if path.lower().endswith(".csv"):
        if not game:
            raise SystemExit("--game is required for CSV input")
        result = read_csv(path, registry.schema_for(game))
        if result.failures:
            print(f"⚠️  {len(result.failures)} rows skipped")
        return result.records
    data = load_container(path)
    return flatten(import_container(data, registry, game=game, default_lang=get_settings().default_lang))


def print_report(report):
    stats = report.stats
    print(f"\n{'─'*70}")
    print(f"📂 {report.game.upper():<6} | UID {report.uid:<12} | {report.region or '-'} | {stats.total_pulls:>5} pulls")
    print(f"{'─'*70}")

    for banner in report.banners:
        history = " ".join(
            f"{e.name}({e.distance})" + ("*" if e.is_crooked else "")
            for e in banner.newest_first()
        )
        print(f"  {banner.name:<30} {banner.total_pulls:>5} | {history or '-'}")

    print(f"\n  📈 STATS:")
    print(f"     On-banner character avg: {stats.up_character_average:>7.2f} ({stats.up_character_count})")
    print(f"     Off-banner character avg:{stats.crooked_character_average:>7.2f} ({stats.crooked_character_count})")
    print(f"     On-banner weapon avg:    {stats.up_weapon_average:>7.2f} ({stats.up_weapon_count})")
    print(f"     Permanent avg:           {stats.permanent_average:>7.2f} ({stats.permanent_top_tier_count})")
    print(f"     Second-tier avg:         {stats.second_tier_average:>7.2f} ({stats.second_tier_count})")
    print(f"     On-banner rate:          {stats.up_character_rate:>6.1f}%")
    if not stats.crooked_resolved:
        print("     ⚠️  On/off-banner split unknown: pass --up-history")
    if stats.favorite:
        print(f"     Luckiest pull:           {stats.favorite} ({stats.favorite_count})")

    print(f"\n  🏆 ACHIEVEMENTS: {', '.join(report.achievements)}")


def cmd_report(args):
    registry = build_default_registry()
    records = load_records(args.file, registry, args.game)

    up_histories = {}
    if args.up_history:
        history = load_up_history(args.up_history)
        for game in {r.game for r in records}:
            up_histories[game] = history

    reports = build_reports(records, registry, up_histories)
    if args.json:
        print(json.dumps([r.to_dict() for r in reports], indent=2, ensure_ascii=False))
        return 0

    print("\n" + "="*70)
    print("🎲 GACHA ANALYZER - REPORT")
    print(f"   Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print("="*70)
    for report in reports:
        print_report(report)
    print(f"\n✅ {len(reports)} account(s) analyzed\n")
    return 0


def cmd_validate(args):
    registry = build_default_registry()
    data = load_container(args.file)
    version = detect_version(data)
    try:
        if is_legacy(data):
            data = migrate_legacy(data, registry, game=args.game)
    except MalformedContainer as exc:
        violations = exc.violations
    else:
        violations = validate_container(data, registry)

    if violations:
        print(f"❌ {args.file} ({version}): {len(violations)} problem(s)")
        for violation in violations:
            print(f"   - {violation}")
        return 1
    print(f"✅ {args.file} ({version}) is valid")
    return 0


def cmd_migrate(args):
    registry = build_default_registry()
    settings = get_settings()
    records = load_records(args.file, registry, args.game)
    container = export_container(
        records, registry, settings.export_app, settings.export_app_version,
        default_lang=settings.default_lang,
    )
    out = args.output or export_filename(container)
    dump_container(container, out)
    print(f"✅ Wrote {len(records)} records to {out}")
    return 0


def cmd_to_csv(args):
    registry = build_default_registry()
    records = load_records(args.file, registry, args.game)
    write_csv(records, args.output)
    print(f"✅ Wrote {len(records)} rows to {args.output}")
    return 0


def build_parser():
    parser = argparse.ArgumentParser(description="Gacha pull-record analyzer")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("report", help="analyze a UIGF or CSV file")
    p.add_argument("file")
    p.add_argument("--game", help="genshin, sr or zzz (CSV and legacy files)")
    p.add_argument("--up-history", help="JSON file of featured-item windows")
    p.add_argument("--json", action="store_true", help="print reports as JSON")
    p.set_defaults(func=cmd_report)

    p = sub.add_parser("validate", help="check a UIGF file")
    p.add_argument("file")
    p.add_argument("--game")
    p.set_defaults(func=cmd_validate)

    p = sub.add_parser("migrate", help="convert a legacy or CSV file to UIGF v4.0")
    p.add_argument("file")
    p.add_argument("--game")
    p.add_argument("-o", "--output")
    p.set_defaults(func=cmd_migrate)

    p = sub.add_parser("to-csv", help="write records as CSV")
    p.add_argument("file")
    p.add_argument("--game")
    p.add_argument("-o", "--output", required=True)
    p.set_defaults(func=cmd_to_csv)
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except GachaError as e:
        print(f"\n❌ {e}")
        return 1
    except KeyboardInterrupt:
        print("\n⏸️  Interrupted by user")
        return 1


if __name__ == '__main__':
    sys.exit(main())
