"""Read annotated methods and recorded oracle verdicts from JSON.

A method document looks like::

    {
      "name": "process",
      "unit": "src/main/java/Foo.java",
      "root": {"kind": "method", "start": 0, "end": 120, "children": [...]},
      "verdicts": [
        {"from": 10, "to": 42, "feasible": true, "parameter_count": 2,
         "extracted_line_count": 5, "complexity_of_new_method": 3}
      ]
    }

Nodes carry the raw `inherent`/`nesting` increments reported by the
complexity analyzer; verdicts are what the extraction oracle answered for
each span, keyed by the start of the first statement and the end of the
last.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from cogreduce.exceptions import LoaderError
from cogreduce.search.oracle import OracleVerdict, TableOracle
from cogreduce.tree.models import MethodTree, Node


class VerdictEntry(BaseModel):
    """A recorded oracle answer for one span."""

    model_config = ConfigDict(populate_by_name=True)

    from_offset: int = Field(alias="from")
    to_offset: int = Field(alias="to")
    feasible: bool
    reason: str = ""
    parameter_count: int = 0
    extracted_line_count: int = 0
    complexity_of_new_method: int = 0

    def to_verdict(self) -> OracleVerdict:
        return OracleVerdict(
            feasible=self.feasible,
            reason=self.reason,
            parameter_count=self.parameter_count,
            extracted_line_count=self.extracted_line_count,
            complexity_of_new_method=self.complexity_of_new_method,
        )


class MethodDocument(BaseModel):
    """A method tree plus the oracle verdicts recorded for it."""

    name: str
    unit: str = ""
    root: Node
    verdicts: list[VerdictEntry] = Field(default_factory=list)

    def to_tree(self) -> MethodTree:
        """A fresh tree over a copy of the document's nodes."""
        try:
            return MethodTree(self.name, self.root.model_copy(deep=True), self.unit or self.name)
        except ValueError as e:
            raise LoaderError(str(e)) from e

    def oracle(self) -> TableOracle:
        oracle = TableOracle()
        for entry in self.verdicts:
            oracle.record(entry.from_offset, entry.to_offset, entry.to_verdict())
        return oracle


def load_method(path: str | Path) -> MethodDocument:
    """Load a method document from a JSON file."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise LoaderError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise LoaderError(f"{path} is not valid JSON: {e}") from e
    try:
        return MethodDocument(**data)
    except (TypeError, ValidationError) as e:
        raise LoaderError(f"{path} is not a valid method document: {e}") from e
