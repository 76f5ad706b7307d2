"""Shared test helpers."""

from urllib.parse import parse_qs, urlsplit


def split_signed_url(url: str) -> dict:
    """Return the query parameters of a signed proxy URL as a flat dict."""
    query = parse_qs(urlsplit(url).query, keep_blank_values=True)
    return {name: values[0] for name, values in query.items()}


def deliver_args(url: str, client_ip: str = "203.0.113.7") -> tuple:
    params = split_signed_url(url)
    return (
        params.get("file_id"),
        params.get("exp"),
        params.get("token"),
        params.get("sig"),
        client_ip,
    )
