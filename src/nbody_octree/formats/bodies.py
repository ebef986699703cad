"""
Body file reading and writing.

A body file holds one comma-separated record per body:

    index,pos_x,pos_y,pos_z,vel_x,vel_y,vel_z,mass,radius

Records are separated by newlines; the final newline is optional. Reading
stops at the first record whose index repeats the previous record's
index, which serves as an end-of-data sentinel.
"""

from __future__ import annotations

import warnings
from pathlib import Path
from typing import Iterable, Union

from ..types import Body, BodyStore
from ..validation import BodyFileWarning, InvalidInputError

PathLike = Union[str, Path]

FIELD_COUNT = 9


def format_body(body: Body) -> str:
    """Format one body as a record (no trailing newline)."""
    values = [*body.position, *body.velocity, body.mass, body.radius]
    return ",".join([str(body.index), *(repr(float(v)) for v in values)])


def format_bodies(bodies: Iterable[Body]) -> str:
    """
    Format bodies as body-file text.

    Floats are written with repr() so parsing the text back gives
    identical values.
    """
    return "\n".join(format_body(body) for body in bodies) + "\n"


def parse_body(record: str, line_number: int = 1) -> Body:
    """
    Parse one record.

    Raises:
        InvalidInputError: If the record is malformed
    """
    fields = [f.strip() for f in record.split(",")]
    if len(fields) != FIELD_COUNT:
        raise InvalidInputError(
            f"line {line_number}: expected {FIELD_COUNT} fields, got {len(fields)}"
        )
    try:
        index = int(fields[0])
        values = [float(f) for f in fields[1:]]
    except ValueError as exc:
        raise InvalidInputError(f"line {line_number}: {exc}") from exc

    try:
        return Body(
            position=values[0:3],
            velocity=values[3:6],
            mass=values[6],
            radius=values[7],
            index=index,
        )
    except InvalidInputError as exc:
        raise InvalidInputError(f"line {line_number}: {exc}") from exc


def parse_bodies(text: str) -> BodyStore:
    """
    Parse body-file text into a BodyStore.

    Blank lines are skipped. A record repeating the previous index ends the
    data; a BodyFileWarning is issued if more records follow it.

    Raises:
        InvalidInputError: If a record is malformed or indices are out of order
    """
    bodies: list[Body] = []
    lines = text.splitlines()
    for line_number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        body = parse_body(line, line_number)
        if bodies and body.index == bodies[-1].index:
            remaining = [rest for rest in lines[line_number:] if rest.strip()]
            if remaining:
                warnings.warn(
                    f"Repeated index {body.index} on line {line_number} ends the body data; "
                    f"{len(remaining)} further line(s) ignored.",
                    BodyFileWarning,
                    stacklevel=2,
                )
            break
        bodies.append(body)
    return BodyStore(bodies)


def read_bodies(path: PathLike) -> BodyStore:
    """
    Read a body file.

    Raises:
        InvalidInputError: If the file is missing, unreadable or malformed
    """
    path = Path(path)
    try:
        text = path.read_text()
    except OSError as exc:
        raise InvalidInputError(f"cannot read body file {path}: {exc.strerror or exc}") from exc
    store = parse_bodies(text)
    if len(store) == 0:
        raise InvalidInputError(f"body file {path} contains no bodies")
    return store


def write_bodies(bodies: Iterable[Body], path: PathLike) -> Path:
    """Write bodies to a body file and return its path."""
    path = Path(path)
    path.write_text(format_bodies(bodies))
    return path


__all__ = [
    "FIELD_COUNT",
    "format_body",
    "format_bodies",
    "parse_body",
    "parse_bodies",
    "read_bodies",
    "write_bodies",
]
