"""TLS material loading for the Kubernetes API and Loggregator connections."""

import ssl


def create_client_context_verified(ca_file: str) -> ssl.SSLContext:
    """Create an SSL context that verifies the server cert against a CA."""
    ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    ctx.load_verify_locations(ca_file)
    ctx.verify_mode = ssl.CERT_REQUIRED
    ctx.check_hostname = True
    ctx.minimum_version = ssl.TLSVersion.TLSv1_2
    return ctx


def read_pem_files(*paths: str) -> tuple[bytes, ...]:
    """Read PEM files as raw bytes, in the order given."""
    contents = []
    for path in paths:
        with open(path, "rb") as f:
            contents.append(f.read())
    return tuple(contents)
