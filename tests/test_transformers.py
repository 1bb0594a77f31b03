"""
Block transformer behaviour, exercised on the mutable tree directly so each
rule can be checked in isolation from the read-only parse.
"""

import pytest

from tfupgrader.core.models import ConfigDocument
from tfupgrader.rules.transformers import BlockTransformer
from tfupgrader.upgrade.context import TransformContext
from tfupgrader.upgrade.structurer import HclStructurer


def run_transform(source: str):
    document = ConfigDocument(filename="main.tf", body=HclStructurer(source, "main.tf").build())
    context = TransformContext(document)
    transformer = BlockTransformer()
    for block in document.body.blocks():
        transformer.apply(block, context)
    return document.body.render(), context


# --- Resource blocks -------------------------------------------------------

def test_resource_model_reference_becomes_model_uuid():
    output, ctx = run_transform('resource "juju_application" "x" {\n  model = juju_model.m.name\n}\n')
    assert output == 'resource "juju_application" "x" {\n  model_uuid = juju_model.m.uuid\n}\n'
    assert ctx.upgraded is True
    assert ctx.changes[0].message == "Upgraded juju_application.x: model -> model_uuid (resource reference)"


def test_resource_data_model_reference_is_labelled_as_data_source():
    output, ctx = run_transform('resource "juju_offer" "o" {\n  model = data.juju_model.m.name\n}\n')
    assert "model_uuid = data.juju_model.m.uuid" in output
    assert ctx.changes[0].message.endswith("(data source reference)")


def test_variable_reference_only_renames_the_key():
    source = 'resource "juju_machine" "x" {\n  model = var.target_model\n}\n'
    output, ctx = run_transform(source)
    assert output == 'resource "juju_machine" "x" {\n  model_uuid = var.target_model\n}\n'
    assert ctx.changes[0].message == "Upgraded juju_machine.x: model -> model_uuid (variable reference)"


@pytest.mark.parametrize("expr", ['"my-model"', "local.model", "juju_model.m.uuid", 'lower(juju_model.m.name)'])
def test_opaque_model_values_are_left_alone(expr):
    source = f'resource "juju_integration" "i" {{\n  model = {expr}\n}}\n'
    output, ctx = run_transform(source)
    assert output == source
    assert ctx.upgraded is False
    assert ctx.warnings == 0


def test_missing_model_attribute_is_not_a_warning():
    source = 'resource "juju_secret" "s" {\n  value = { a = "b" }\n}\n'
    output, ctx = run_transform(source)
    assert output == source
    assert (ctx.upgraded, ctx.warnings) == (False, 0)


def test_unknown_resource_types_are_untouched():
    source = 'resource "aws_instance" "i" {\n  model  = juju_model.m.name\n  series = "jammy"\n}\n'
    output, ctx = run_transform(source)
    assert output == source
    assert ctx.upgraded is False


def test_resource_with_one_label_is_skipped():
    source = 'resource "juju_application" {\n  model = juju_model.m.name\n}\n'
    output, ctx = run_transform(source)
    assert output == source


# --- Deprecated fields -----------------------------------------------------

def test_principal_is_removed():
    source = 'resource "juju_application" "x" {\n  name      = "x"\n  principal = true\n}\n'
    output, ctx = run_transform(source)
    assert output == 'resource "juju_application" "x" {\n  name      = "x"\n}\n'
    assert ctx.upgraded is True
    assert "principal" in ctx.changes[0].message


@pytest.mark.parametrize("declared_type", ["juju_application", "juju_machine"])
def test_series_becomes_base_verbatim(declared_type):
    source = f'resource "{declared_type}" "x" {{\n  series = "jammy" # lts\n}}\n'
    output, ctx = run_transform(source)
    assert output == f'resource "{declared_type}" "x" {{\n  base = "jammy" # lts\n}}\n'
    assert ctx.changes[0].message == f"Upgraded {declared_type}.x: 'series' -> 'base'"


def test_placement_only_warns():
    source = '\n\nresource "juju_application" "x" {\n  placement = "0"\n}\n'
    output, ctx = run_transform(source)
    assert output == source
    assert ctx.upgraded is False
    [advisory] = ctx.advisories
    assert advisory.line == 3
    assert advisory.location() == "main.tf:3:1"
    assert "'placement'" in advisory.message and "'machines'" in advisory.message


def test_machine_placement_is_not_a_deprecated_field():
    source = 'resource "juju_machine" "x" {\n  placement = "lxd:0"\n  principal = true\n}\n'
    output, ctx = run_transform(source)
    assert output == source
    assert ctx.warnings == 0


def test_rename_and_deprecations_apply_together():
    source = (
        'resource "juju_application" "app" {\n'
        "  model     = juju_model.m.name\n"
        "  principal = false\n"
        "  series    = var.series\n"
        "}\n"
    )
    output, ctx = run_transform(source)
    assert output == (
        'resource "juju_application" "app" {\n'
        "  model_uuid = juju_model.m.uuid\n"
        "  base      = var.series\n"
        "}\n"
    )
    assert len(ctx.changes) == 3


# --- Data blocks -----------------------------------------------------------

def test_data_model_name_variable_becomes_uuid():
    output, ctx = run_transform('data "juju_model" "m" {\n  name = var.model_uuid\n}\n')
    assert output == 'data "juju_model" "m" {\n  uuid = var.model_uuid\n}\n'
    assert ctx.warnings == 0


def test_data_model_literal_name_warns_without_change():
    source = 'data "juju_model" "m" {\n  name = "prod"\n}\n'
    output, ctx = run_transform(source)
    assert output == source
    assert ctx.upgraded is False
    [advisory] = ctx.advisories
    assert advisory.message.startswith("Data source 'juju_model' may need review")
    assert advisory.line == 1


def test_data_model_without_name_warns():
    _, ctx = run_transform('data "juju_model" "m" {\n  uuid = "1234"\n}\n')
    assert ctx.warnings == 1


def test_data_model_conditional_reference_is_skipped_silently():
    source = 'data "juju_model" "m" {\n  name = var.x ? juju_model.a.name : juju_model.b.name\n}\n'
    output, ctx = run_transform(source)
    assert output == source
    assert (ctx.upgraded, ctx.warnings) == (False, 0)


def test_data_application_model_reference():
    output, ctx = run_transform('data "juju_application" "a" {\n  model = juju_model.m.name\n}\n')
    assert output == 'data "juju_application" "a" {\n  model_uuid = juju_model.m.uuid\n}\n'


def test_data_application_opaque_model_does_not_warn():
    # Only declared types containing "model" raise the review warning
    source = 'data "juju_application" "a" {\n  model = "prod"\n}\n'
    output, ctx = run_transform(source)
    assert output == source
    assert ctx.warnings == 0


def test_unsupported_data_source_is_untouched():
    source = 'data "juju_offer" "o" {\n  model = juju_model.m.name\n}\n'
    output, ctx = run_transform(source)
    assert output == source
    assert (ctx.upgraded, ctx.warnings) == (False, 0)


# --- Outputs ---------------------------------------------------------------

def test_output_value_is_rewritten_in_place():
    source = 'output "model" {\n  value       = juju_model.m.name\n  sensitive   = false\n}\n'
    output, ctx = run_transform(source)
    assert output == 'output "model" {\n  value       = juju_model.m.uuid\n  sensitive   = false\n}\n'
    assert ctx.changes[0].message == "Upgraded output.model: .name -> .uuid (resource reference)"


@pytest.mark.parametrize("expr", ["var.model", "juju_application.a.name", '"x"'])
def test_output_other_values_untouched(expr):
    source = f'output "o" {{\n  value = {expr}\n}}\n'
    output, ctx = run_transform(source)
    assert output == source
    assert (ctx.upgraded, ctx.warnings) == (False, 0)


# --- Variables -------------------------------------------------------------

def test_model_variable_warns_without_mutation():
    source = 'variable "model_name" {}\n'
    output, ctx = run_transform(source)
    assert output == source
    assert ctx.upgraded is False
    assert ctx.warnings == 1
    assert ctx.advisories[0].description is None


def test_model_variable_description_is_attached():
    source = 'variable "target_model" {\n  description = "The Model to deploy into"\n}\n'
    _, ctx = run_transform(source)
    assert ctx.advisories[0].description == "The Model to deploy into"


def test_unrelated_description_is_not_attached():
    _, ctx = run_transform('variable "model" {\n  description = "Where things go"\n}\n')
    assert ctx.advisories[0].description is None


def test_other_variables_are_silent():
    _, ctx = run_transform('variable "channel" {\n  description = "model channel"\n}\n')
    assert ctx.warnings == 0


# --- Terraform block -------------------------------------------------------

PROVIDERS = """terraform {
  required_providers {
    juju = {
      source  = "juju/juju"
      version = "%s"
    }
  }
}
"""


@pytest.mark.parametrize("constraint", ["0.19.0", "~> 0.20", ">= 0.17.1"])
def test_zero_major_constraint_is_upgraded(constraint):
    output, ctx = run_transform(PROVIDERS % constraint)
    assert output == PROVIDERS % "~> 1.0"
    assert ctx.changes[0].address == "terraform.required_providers.juju"


@pytest.mark.parametrize("constraint", ["1.0.0", ">= 1.0.0", "~> 1.0"])
def test_current_constraints_are_untouched(constraint):
    output, ctx = run_transform(PROVIDERS % constraint)
    assert output == PROVIDERS % constraint
    assert ctx.upgraded is False


def test_other_providers_are_untouched():
    source = PROVIDERS.replace("juju = {", "lxd = {") % "0.3.0"
    output, ctx = run_transform(source)
    assert output == source


# --- Dispatch --------------------------------------------------------------

def test_unknown_block_kinds_pass_through():
    source = 'provider "juju" {\n  model = juju_model.m.name\n}\nmodule "m" {\n  series = "jammy"\n}\n'
    output, ctx = run_transform(source)
    assert output == source
    assert (ctx.upgraded, ctx.warnings) == (False, 0)
