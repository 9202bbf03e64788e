"""Command-line entry point: run one audit and print the JSON record."""

import argparse
import asyncio
import json
import sys

from dotenv import load_dotenv

from webaudit.config.settings import get_config
from webaudit.core.ai import DisabledEnricher, build_enricher
from webaudit.core.audit import analyze, launch_config_from, run_audit
from webaudit.errors.exceptions import AuditError, ValidationError
from webaudit.schemas.audit import AuditRequest, AuditResults
from webaudit.schemas.common import AuditStatus
from webaudit.services.validators import validate_audit_request


async def _run(request: AuditRequest, with_ai: bool) -> AuditResults:
    config = get_config()
    results = await run_audit(request, launch_config_from(config))
    enricher = build_enricher(config) if with_ai else DisabledEnricher()
    analysis = await analyze(results, enricher)
    return results.model_copy(update={"ai_analysis": analysis, "status": AuditStatus.COMPLETED})


def _fail(message: str) -> None:
    print(json.dumps({"status": "failed", "error": message}))
    sys.exit(1)


def main() -> None:
    """Run a web quality audit and output JSON to stdout."""
    parser = argparse.ArgumentParser(description="Web quality audit CLI tool")
    parser.add_argument("url", nargs="?", help="URL to audit")
    parser.add_argument(
        "--device",
        choices=["mobile", "desktop"],
        default="desktop",
        help="Device to emulate (default: desktop)",
    )
    parser.add_argument(
        "--throttling",
        action="store_true",
        help="Apply the fixed network/CPU throttling profile",
    )
    parser.add_argument(
        "--no-ai",
        action="store_true",
        help="Skip AI enrichment",
    )
    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Validate inputs without running audit",
    )

    args = parser.parse_args()

    try:
        # Load environment variables from .env file
        load_dotenv()

        if not args.url:
            raise ValidationError("URL is required")

        request = validate_audit_request(
            {"url": args.url, "options": {"device": args.device, "throttling": args.throttling}}
        )

        if args.validate_only:
            print(
                json.dumps(
                    {
                        "status": "success",
                        "message": "Validation successful",
                        "validated_url": request.url,
                    }
                )
            )
            return

        result = asyncio.run(_run(request, with_ai=not args.no_ai))
        print(result.model_dump_json(indent=2, by_alias=True))

    except ValidationError as e:
        details = "; ".join(f"{issue.path}: {issue.message}" for issue in e.issues)
        _fail(f"Validation error: {details or e}")
    except AuditError as e:
        _fail(str(e))
    except Exception as e:
        _fail(f"Unexpected error: {e}")


if __name__ == "__main__":
    main()
