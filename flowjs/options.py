# flowjs/options.py
from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class CompileOptions:
    function_name: str = "flow"      # name of the generated async function
    http_client: str = "axios"       # object whose methods perform http calls
    indent: str = "  "               # per nesting level in generated source
    nest_conditionals: bool = False  # append an if to its branch block, not the Program root
