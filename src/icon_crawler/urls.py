"""Website address normalization."""

DEFAULT_SCHEME = "https://"
_KNOWN_SCHEMES = ("http://", "https://")


def has_scheme(address: str) -> bool:
    return address.strip().lower().startswith(_KNOWN_SCHEMES)


def normalize_website(address: str, default_scheme: str = DEFAULT_SCHEME) -> str:
    """Trim ``address`` and prepend ``default_scheme`` unless it already has one.

    Idempotent: normalize_website(normalize_website(x)) == normalize_website(x).
    """
    address = address.strip()
    if has_scheme(address):
        return address
    return f"{default_scheme}{address}"
