"""Client IP extraction for direct and proxied requests."""


def get_client_ip(request_meta):
    """
    Return the client address from ``request.META``.

    The first hop of X-Forwarded-For wins over REMOTE_ADDR. Returns None
    when no address is available so the value can be stored in a nullable
    GenericIPAddressField.
    """
    x_forwarded_for = request_meta.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
        if ip:
            return ip

    remote_addr = request_meta.get('REMOTE_ADDR')
    if remote_addr:
        return remote_addr.strip()

    return None
