"""Pre-deploy check that the server environment is configured."""

import argparse
import os
import sys
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

from dotenv import dotenv_values

REQUIRED_VARS = [
    "FIREBASE_API_KEY",
    "FIREBASE_AUTH_DOMAIN",
    "FIREBASE_PROJECT_ID",
    "FIREBASE_STORAGE_BUCKET",
    "FIREBASE_MESSAGING_SENDER_ID",
    "FIREBASE_APP_ID",
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "SUPABASE_SERVICE_ROLE_KEY",
]

OPTIONAL_VARS = [
    "GA_MEASUREMENT_ID",
    "DODO_PAYMENTS_API_KEY",
    "PRODUCT_ID",
    "DODO_WEBHOOK_SECRET",
    "PORT",
]

SEPARATOR = "=" * 32


def load_environment(env_file: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Merge `.env` values under the process environment (process wins)."""
    values: Dict[str, str] = {}
    if env_file is not None and env_file.exists():
        values.update({k: v for k, v in dotenv_values(env_file).items() if v is not None})
    values.update(os.environ if environ is None else environ)
    return values


def check(values: Mapping[str, str]) -> Tuple[List[str], List[str]]:
    """Return (missing required, configured optional) variable names."""
    missing = [name for name in REQUIRED_VARS if not values.get(name)]
    configured = [name for name in OPTIONAL_VARS if values.get(name)]
    return missing, configured


def render_report(values: Mapping[str, str]) -> Tuple[str, bool]:
    missing, configured = check(values)
    lines = ["", "Verifying environment variables...", "", "Required environment variables:", SEPARATOR]
    for name in REQUIRED_VARS:
        value = values.get(name)
        if value:
            lines.append(f"[ok] {name}: Set ({value[:10]}...)")
        else:
            lines.append(f"[missing] {name}: MISSING")

    lines += ["", "Optional environment variables:", SEPARATOR]
    for name in OPTIONAL_VARS:
        lines.append(f"[ok] {name}: Set" if name in configured else f"[warn] {name}: Not set")

    lines += ["", SEPARATOR, "Summary:", SEPARATOR]
    ok = not missing
    if ok:
        lines.append("All required environment variables are set.")
        if configured:
            lines.append("Optional features are configured.")
        else:
            lines.append("Optional features are not configured (analytics, payments).")
    else:
        lines.append(f"Missing required environment variables: {', '.join(missing)}")
        lines.append("Add them to a .env file in the project root or to the deployment environment.")
        lines.append("Do not commit your .env file.")
    return "\n".join(lines), ok


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Verify VCNotebook server environment variables")
    parser.add_argument("--env-file", default=".env", help="dotenv file to read (default: .env)")
    args = parser.parse_args(argv)

    report, ok = render_report(load_environment(Path(args.env_file)))
    print(report)
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
