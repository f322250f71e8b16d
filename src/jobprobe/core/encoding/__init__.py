"""Encoders for probe report documents."""

from jobprobe.core.encoding.prtg import encode_json, encode_xml

__all__ = ["encode_json", "encode_xml"]
