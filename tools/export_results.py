from __future__ import annotations
import argparse, sys
from pathlib import Path
from api.storage import list_results, load_user
from numsense_core.export import export_filename, to_csv


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Write a user's stored results as CSV (reads DATA_DIR).")
    ap.add_argument("user_id")
    ap.add_argument("--out", default=None, help="output path; defaults to assessment_results_<id>.csv")
    args = ap.parse_args(argv)

    user = load_user(args.user_id)
    if user is None:
        print(f"unknown user {args.user_id}", file=sys.stderr)
        return 1
    results = list_results(user.id)
    out = Path(args.out or export_filename(user.id))
    out.write_text(to_csv(results, {user.id: user}), encoding="utf-8")
    print(f"Wrote {len(results)} result(s) to {out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
