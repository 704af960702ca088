# labelscan worker.py: score one OCR'd label from the command line
import argparse
import json
import sys
import traceback

from labelscan.classifier import build_classifier
from labelscan.config import Settings
from labelscan.db_supabase import SupabaseDB
from labelscan.models import OcrResult, UserProfile
from labelscan.pipeline import run_scan

EXIT_OK = 0
EXIT_NO_INGREDIENTS = 1
EXIT_ERROR = 2


def _log(msg: str) -> None:
    print(msg, file=sys.stderr)


def read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as f:
        return f.read()


def load_profile(args, db: SupabaseDB | None) -> UserProfile:
    if args.profile:
        with open(args.profile, encoding="utf-8") as f:
            return UserProfile.from_dict(json.load(f))
    if args.user_id and db is not None:
        row = db.get_profile(args.user_id)
        if row is None:
            _log(f"[scan] no profile for user {args.user_id}; scoring with an empty profile")
        return UserProfile.from_dict(row)
    return UserProfile()


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Personalized ingredient risk report for a product label")
    ap.add_argument("--text-file", default="-", help="OCR text file ('-' reads stdin)")
    ap.add_argument("--confidence", type=float, default=100.0, help="OCR confidence 0-100")
    ap.add_argument("--profile", help="JSON file with the health profile")
    ap.add_argument("--user-id", help="Load the profile from Supabase for this user")
    ap.add_argument("--no-classifier", action="store_true", help="Score with the local database only")
    ap.add_argument("--save", action="store_true", help="Store the scan for --user-id")
    return ap


def main(argv=None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    if args.save and not args.user_id:
        ap.error("--save requires --user-id")

    try:
        s = Settings.from_env()
        db = None
        if args.user_id and (args.save or not args.profile):
            s.require_supabase()
            db = SupabaseDB(s.supabase_url, s.supabase_service_role_key)

        profile = load_profile(args, db)
        classifier = None if args.no_classifier else build_classifier(s)
        if classifier is None:
            _log("[scan] no classifier configured; using local database")

        ocr = OcrResult(text=read_text(args.text_file), confidence=args.confidence)
        if ocr.is_low_confidence:
            _log("[scan] low OCR confidence; review the extracted ingredients carefully")

        report = run_scan(
            ocr,
            profile,
            classifier=classifier,
            db=db if args.save else None,
            user_id=args.user_id,
        )
    except Exception:
        _log("FATAL: " + traceback.format_exc())
        return EXIT_ERROR

    print(json.dumps(report.to_dict(), ensure_ascii=False, indent=2))

    if report.no_ingredients:
        _log("[scan] no ingredients found; try a clearer photo")
        return EXIT_NO_INGREDIENTS
    if args.save:
        _log(f"[save] scan stored for user {args.user_id}")
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
