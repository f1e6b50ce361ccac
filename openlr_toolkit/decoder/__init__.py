"""Map matching decoder.

- decode / decode_binary / decode_base64: Reference -> location on a graph
- find_candidate_lines, rate_line: Per-LRP candidate search and rating
- resolve_routes, trim_path: Route chain selection and offset trimming
"""

from openlr_toolkit.decoder.candidates import CandidateLine, find_candidate_lines, rate_line
from openlr_toolkit.decoder.decoder import decode, decode_base64, decode_binary
from openlr_toolkit.decoder.routes import Route, resolve_routes, trim_path

__all__ = [
    "CandidateLine",
    "find_candidate_lines",
    "rate_line",
    "Route",
    "resolve_routes",
    "trim_path",
    "decode",
    "decode_binary",
    "decode_base64",
]
