#!/usr/bin/env python3
"""
TFUPGRADER CLASSIFIER - Expression Triage
-----------------------------------------
Decides what kind of value an attribute expression holds, working purely on
the raw expression text.

The model-name test is textual: any expression that mentions
`juju_model.` and ends in `.name` qualifies, even if the type name only
appears inside a longer identifier. Rewriting is additionally gated on the
expression being a plain traversal (see upgrade_model_reference).
"""

import re
from enum import Enum
from typing import Optional

MODEL_TYPE = "juju_model"
MODEL_REFERENCE = f"{MODEL_TYPE}."
DATA_MODEL_REFERENCE = f"data.{MODEL_TYPE}."
NAME_SUFFIX = ".name"
UUID_SUFFIX = ".uuid"
VARIABLE_PREFIX = "var."

# root.attr, root.attr[0], root.attr["key"], root.attr[*] ...
TRAVERSAL = re.compile(r'^[A-Za-z_][\w-]*(?:\.[A-Za-z_][\w-]*|\.\d+|\[[^\[\]\n]+\])*$')


class ExpressionKind(Enum):
    MODEL_NAME_REFERENCE = "model name reference"
    VARIABLE_REFERENCE = "variable reference"
    OPAQUE = "opaque"


def is_model_name_reference(expr: str) -> bool:
    # Also matches data.juju_model.* since the data prefix contains the type
    return MODEL_REFERENCE in expr and expr.endswith(NAME_SUFFIX)


def is_variable_reference(expr: str) -> bool:
    return expr.lstrip().startswith(VARIABLE_PREFIX)


def classify(expr: str) -> ExpressionKind:
    if is_model_name_reference(expr):
        return ExpressionKind.MODEL_NAME_REFERENCE
    if is_variable_reference(expr):
        return ExpressionKind.VARIABLE_REFERENCE
    return ExpressionKind.OPAQUE


def reference_kind(expr: str) -> str:
    """Human label for the referenced block: a data source or a resource."""
    return "data source" if DATA_MODEL_REFERENCE in expr else "resource"


def upgrade_model_reference(expr: str) -> Optional[str]:
    """
    Swaps the final `.name` segment of a traversal for `.uuid`.

    Returns None for anything that is not a plain traversal, such as a
    conditional or a function call that happens to end in `.name`.
    """
    text = expr.strip()
    if not text.endswith(NAME_SUFFIX) or not TRAVERSAL.match(text):
        return None
    return text[:-len(NAME_SUFFIX)] + UUID_SUFFIX
