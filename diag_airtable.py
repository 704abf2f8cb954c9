# diag_airtable.py
import json
import sys

from resume_intake import config
from resume_intake.airtable_client import check_connection


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    table = argv[0] if argv else config.AIRTABLE_TABLE_NAME

    print("ENV CHECK")
    print(" AIRTABLE_BASE_ID:", config.AIRTABLE_BASE_ID)
    print(" AIRTABLE_TABLE_NAME:", repr(table))
    print(" AIRTABLE_TOKEN present?:", bool(config.AIRTABLE_TOKEN))
    print(" OPENAI_API_KEY present?:", bool(config.OPENAI_API_KEY))
    print()

    report = check_connection(table)
    print(json.dumps(report, indent=2))
    print("-" * 60)
    return 0 if report.get("ok") else 2


if __name__ == "__main__":
    raise SystemExit(main())
