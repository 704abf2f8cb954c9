#!/usr/bin/env python3
import argparse, pathlib, logging, sys, json
from resume_intake import config
from resume_intake.pipeline import parse_resume
from resume_intake.candidate_store import save_candidate, email_exists, to_table_fields
from resume_intake.validators import is_valid_email

logger = logging.getLogger("import_resumes")

SUPPORTED_SUFFIXES = {".pdf"}

def iter_resume_files(path: str):
    p = pathlib.Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Path not found: {path}")
    if p.is_dir():
        return sorted([f for f in p.iterdir() if f.suffix.lower() in SUPPORTED_SUFFIXES])
    if p.suffix.lower() not in SUPPORTED_SUFFIXES:
        raise ValueError(f"Unsupported file type: {p.suffix}")
    return [p]


def main(argv=None):
    ap = argparse.ArgumentParser(description="Parse PDF resumes and store them in Airtable.")
    ap.add_argument("path", help="PDF file or directory containing PDF resumes")
    ap.add_argument("--dry-run", action="store_true", help="Don't store; just print payloads")
    ap.add_argument("--allow-duplicates", action="store_true",
                    help="Store even when a candidate with the same email exists")
    args = ap.parse_args(argv)

    try:
        files = iter_resume_files(args.path)
    except (FileNotFoundError, ValueError) as e:
        logger.error("Error enumerating files: %s", e)
        sys.exit(1)

    inserted = skipped_exists = errors = 0
    details = []

    for f in files:
        fpath = str(f)
        logger.info("Processing: %s", fpath)
        try:
            record = parse_resume(fpath)
            email = record.email

            if not args.allow_duplicates and is_valid_email(email) and email_exists(email):
                logger.info("Record already exists, skipping: %s", email)
                skipped_exists += 1
                details.append({"file": fpath, "status": "skipped_exists", "key": email})
                continue

            if args.dry_run:
                payload = to_table_fields(record, f.name)
                logger.info("[DRY RUN] Would store: %s (%s)", email or f.name, record.parsing_method)
                details.append({"file": fpath, "status": "dry_run", "method": record.parsing_method, "payload": payload})
                continue

            rec = save_candidate(record, f.name)
            rec_id = rec.get("id")
            logger.info("Stored %s -> id=%s", email or f.name, rec_id)
            inserted += 1
            details.append({"file": fpath, "status": "inserted", "method": record.parsing_method, "id": rec_id})

        except Exception as e:
            logger.exception("Error processing %s: %s", fpath, e)
            errors += 1
            details.append({"file": fpath, "status": "error", "error": str(e)})

    # Summary
    print("\n===== Import Summary =====")
    print(f"Table                : {config.AIRTABLE_TABLE_NAME}")
    print(f"Total files processed : {len(files)}")
    print(f"Inserted             : {inserted}")
    print(f"Skipped (exists)     : {skipped_exists}")
    print(f"Errors               : {errors}")
    print("==========================\n")

    for d in details:
        s = d.get("status")
        fp = d.get("file")
        if s == "inserted":
            print(f"[INSERTED] {fp} via {d.get('method')} (id={d.get('id')})")
        elif s == "skipped_exists":
            print(f"[SKIP:EXISTS] {fp} -> {d.get('key')}")
        elif s == "dry_run":
            print(f"[DRY RUN] {fp} via {d.get('method')}")
            print(json.dumps(d.get("payload", {}), indent=2))
        else:
            print(f"[ERROR] {fp} -> {d.get('error')}")

    sys.exit(0 if errors == 0 else 2)

if __name__ == "__main__":
    main()
