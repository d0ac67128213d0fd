import click

from .models import Result

RULE = " ========= "


def format_result(result: Result) -> str:
    job = result.original_job
    return "\n".join([
        RULE,
        f"Title: {result.title or ''}",
        f"Status Code: {result.status_code or 0}",
        f"Request Duration: {result.duration_ms} Milliseconds",
        f"Original Suggested Name: {job.suggested_name}",
        f"Target URL: {job.target_url}",
        f"Success: {str(result.success).lower()}",
        RULE,
    ])


def echo_result(result: Result) -> None:
    click.secho(format_result(result), fg=None if result.success else "red")
