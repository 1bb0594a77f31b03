#!/usr/bin/env python3
"""
TFUPGRADER BLOCK TRANSFORMERS - Rule Enforcement
------------------------------------------------
The BlockTransformer evaluates each top-level block against the migration
rule tables. It rewrites only what matches a rule unambiguously and turns
everything that needs human judgement into an advisory.

No step here can fail: a rule whose preconditions are not met is simply
skipped.

Author: juju-tf-upgrader maintainers
Date: 2026-10-18
"""

from typing import Callable, Dict

from tfupgrader.core.models import Block
from tfupgrader.rules.classifier import (
    ExpressionKind,
    classify,
    reference_kind,
    upgrade_model_reference,
)
from tfupgrader.rules.tables import (
    PROVIDER_NAME,
    UPGRADED_VERSION_CONSTRAINT,
    VERSION_ZERO_PATTERN,
    BlockKind,
    DeprecatedAction,
    FieldRename,
    data_source_rename,
    deprecated_fields,
    resource_rename,
)
from tfupgrader.upgrade.context import TransformContext

MODEL_HINT = "model"


class BlockTransformer:
    """
    Dispatches a block to the transformer for its kind.
    Kinds outside BlockKind pass through unexamined.
    """

    def __init__(self):
        self.handlers: Dict[BlockKind, Callable[[Block, TransformContext], None]] = {
            BlockKind.RESOURCE: self._transform_resource,
            BlockKind.DATA: self._transform_data,
            BlockKind.OUTPUT: self._transform_output,
            BlockKind.VARIABLE: self._transform_variable,
            BlockKind.TERRAFORM: self._transform_terraform,
        }

    def apply(self, block: Block, context: TransformContext):
        try:
            kind = BlockKind(block.kind)
        except ValueError:
            return
        self.handlers[kind](block, context)

    # --- Shared rename step ----------------------------------------------

    def _rename_field(self, block: Block, rename: FieldRename, context: TransformContext) -> bool:
        """
        Applies a field rename when the source attribute holds a model-name
        or variable reference. Returns True when the block was rewritten.
        """
        attr = block.body.get_attribute(rename.source)
        if attr is None:
            return False

        declared_type, name = block.labels[0], block.labels[1]
        address = f"{declared_type}.{name}"
        original = attr.expr
        kind = classify(original)

        if kind is ExpressionKind.MODEL_NAME_REFERENCE:
            upgraded = upgrade_model_reference(original)
            if upgraded is None:
                return False
            block.body.rename_attribute(rename.source, rename.target, expr=upgraded)
            ref = reference_kind(original)
            if rename.source == rename.target:
                message = f"Upgraded {address}: {rename.source} reference .name -> .uuid ({ref} reference)"
            else:
                message = f"Upgraded {address}: {rename.source} -> {rename.target} ({ref} reference)"
            context.record_change(address, message)
            return True

        if kind is ExpressionKind.VARIABLE_REFERENCE:
            # The variable is assumed to already hold the right identifier kind
            block.body.rename_attribute(rename.source, rename.target)
            if rename.source == rename.target:
                message = f"Upgraded {address}: {rename.source} with variable reference (field name unchanged)"
            else:
                message = f"Upgraded {address}: {rename.source} -> {rename.target} (variable reference)"
            context.record_change(address, message)
            return True

        return False

    # --- Kind handlers ---------------------------------------------------

    def _transform_resource(self, block: Block, context: TransformContext):
        if len(block.labels) < 2:
            return

        rename = resource_rename(block.labels[0])
        if rename is not None:
            self._rename_field(block, rename, context)

        self._handle_deprecated_fields(block, context)

    def _handle_deprecated_fields(self, block: Block, context: TransformContext):
        declared_type, name = block.labels[0], block.labels[1]
        address = f"{declared_type}.{name}"
        body = block.body

        for rule in deprecated_fields(declared_type):
            if body.get_attribute(rule.name) is None:
                continue

            if rule.action is DeprecatedAction.WARN:
                context.warn(
                    block,
                    f"{address} uses deprecated '{rule.name}' field - use '{rule.replacement}' instead. "
                    f"See documentation for migration guidance.",
                )
            elif rule.action is DeprecatedAction.REMOVE:
                body.remove_attribute(rule.name)
                context.record_change(address, f"Removed deprecated '{rule.name}' field from {address} (field was unused)")
            elif rule.action is DeprecatedAction.RENAME:
                body.rename_attribute(rule.name, rule.replacement)
                context.record_change(address, f"Upgraded {address}: '{rule.name}' -> '{rule.replacement}'")

    def _transform_data(self, block: Block, context: TransformContext):
        if len(block.labels) < 2:
            return

        declared_type = block.labels[0]
        rename = data_source_rename(declared_type)
        if rename is None:
            return

        if self._rename_field(block, rename, context):
            return

        # A model reference that is not a plain traversal is skipped silently
        attr = block.body.get_attribute(rename.source)
        if attr is not None and classify(attr.expr) is not ExpressionKind.OPAQUE:
            return

        if MODEL_HINT in declared_type:
            context.warn(
                block,
                f"Data source '{declared_type}' may need review - check if it should use model UUID instead of name",
            )

    def _transform_output(self, block: Block, context: TransformContext):
        if not block.labels:
            return

        attr = block.body.get_attribute("value")
        if attr is None or classify(attr.expr) is not ExpressionKind.MODEL_NAME_REFERENCE:
            return

        upgraded = upgrade_model_reference(attr.expr)
        if upgraded is None:
            return

        ref = reference_kind(attr.expr)
        block.body.set_expression("value", upgraded)
        context.record_change(
            f"output.{block.labels[0]}",
            f"Upgraded output.{block.labels[0]}: .name -> .uuid ({ref} reference)",
        )

    def _transform_variable(self, block: Block, context: TransformContext):
        if not block.labels:
            return

        name = block.labels[0]
        if MODEL_HINT not in name:
            return

        description = None
        desc_attr = block.body.get_attribute("description")
        if desc_attr is not None:
            text = desc_attr.expr.strip().strip('"').strip()
            if MODEL_HINT in text.lower():
                description = text

        context.warn(
            block,
            f"Variable '{name}' may need review - check if it should use model UUID instead of name",
            description=description,
        )

    def _transform_terraform(self, block: Block, context: TransformContext):
        providers = block.body.first_block("required_providers")
        if providers is None:
            return

        attr = providers.body.get_attribute(PROVIDER_NAME)
        if attr is None or not VERSION_ZERO_PATTERN.search(attr.expr):
            return

        providers.body.set_expression(PROVIDER_NAME, VERSION_ZERO_PATTERN.sub(UPGRADED_VERSION_CONSTRAINT, attr.expr))
        context.record_change(
            f"terraform.required_providers.{PROVIDER_NAME}",
            f"Upgraded terraform.required_providers.{PROVIDER_NAME}: version 0.x -> ~> 1.0",
        )
