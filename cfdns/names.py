APEX = "@"


def denormalize_name(short_name: str, zone_apex: str) -> str:
    """
    Build the fully-qualified name Cloudflare expects from a short name.

    Eg:
        >>> denormalize_name("www", "example.com")
        'www.example.com'
        >>> denormalize_name("@", "example.com")
        'example.com'
    """
    if short_name == APEX:
        return zone_apex
    return f"{short_name}.{zone_apex}"


def normalize_name(fqdn: str, zone_apex: str) -> str:
    """
    Strip the zone suffix from a fully-qualified name.

    Returns "@" for the zone apex, and the name unchanged when it is not
    part of the zone.
    """
    if fqdn == zone_apex:
        return APEX
    return fqdn.removesuffix(f".{zone_apex}")
