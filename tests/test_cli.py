import pytest
from ruamel.yaml import YAML

from tfupgrader.cli.main import VERSION, TfUpgraderCLI

SOURCE = 'resource "juju_machine" "m" {\n  model  = juju_model.dev.name\n  series = "jammy"\n}\n'
EXPECTED = 'resource "juju_machine" "m" {\n  model_uuid = juju_model.dev.uuid\n  base = "jammy"\n}\n'


@pytest.fixture
def project(tmp_path):
    (tmp_path / "main.tf").write_text(SOURCE)
    (tmp_path / "variables.tf").write_text('variable "model_name" {\n  type = string\n}\n')
    return tmp_path


def test_upgrade_in_place(project, capsys):
    assert TfUpgraderCLI().run([str(project)]) == 0
    assert (project / "main.tf").read_text() == EXPECTED

    out = capsys.readouterr().out
    assert "Found 2 Terraform files" in out
    assert "Summary: 1 out of 2 files were upgraded" in out
    assert "model_name" in out


def test_dry_run_with_diff(project, capsys):
    assert TfUpgraderCLI().run([str(project), "--dry-run", "--diff"]) == 0
    assert (project / "main.tf").read_text() == SOURCE
    assert "Dry run" in capsys.readouterr().out


def test_backup_flag(project):
    TfUpgraderCLI().run([str(project), "--backup"])
    assert (project / "main.tf.tfupgrade.backup").read_text() == SOURCE


def test_report_file(project, tmp_path_factory):
    report = tmp_path_factory.mktemp("out") / "report.yaml"
    assert TfUpgraderCLI().run([str(project), "--report", str(report)]) == 0

    data = YAML(typ="safe").load(report.read_text())
    assert data["summary"]["total_files"] == 2
    assert data["summary"]["total_warnings"] == 1
    statuses = sorted(entry["status"] for entry in data["files"])
    assert statuses == ["REVIEW", "UPGRADED"]


def test_missing_path_is_an_error(tmp_path, capsys):
    assert TfUpgraderCLI().run([str(tmp_path / "nowhere")]) == 1
    assert "Error" in capsys.readouterr().out


def test_empty_directory(tmp_path, capsys):
    assert TfUpgraderCLI().run([str(tmp_path)]) == 0
    assert "No .tf files found to process" in capsys.readouterr().out


def test_parse_failure_does_not_fail_the_run(project):
    (project / "broken.tf").write_text('resource "juju_application" "x" {\n')
    assert TfUpgraderCLI().run([str(project)]) == 0
    assert (project / "main.tf").read_text() == EXPECTED


def test_version_flag(capsys):
    with pytest.raises(SystemExit) as exc:
        TfUpgraderCLI().run(["--version"])
    assert exc.value.code == 0
    assert VERSION in capsys.readouterr().out
