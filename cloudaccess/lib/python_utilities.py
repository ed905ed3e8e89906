def to_wire(text):
    """
    Text bodies go on the wire as UTF-8 with CRLF line endings.  Byte
    bodies are passed through untouched, since file uploads must not
    be altered.
    """
    if text is None:
        return None
    if isinstance(text, bytes):
        return text
    text = bytes(text, "utf-8")
    text = text.replace(b"\n", b"\r\n")
    text = text.replace(b"\r\r\n", b"\r\n")
    return text


def to_normal_str(text):
    """
    Make sure we return a normal string, no matter if we're fed
    bytes or str
    """
    if text is None:
        return text
    if not isinstance(text, str):
        text = text.decode("utf-8", errors="replace")
    text = text.replace("\r\n", "\n")
    return text
