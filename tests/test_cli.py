"""
Tests for the proposal CLI.
"""

import json

import pytest

from reporting.cli import main


@pytest.fixture
def proposal_file(tmp_path):
    path = tmp_path / "cliente.json"
    path.write_text(json.dumps({
        "client_name": "Ana Paula Souza",
        "proposal_date": "05/11/2026",
        "power_kwp": "6,6",
        "monthly_generation_kwh": 820,
        "module_model": "JA Solar 550W",
        "module_quantity": 12,
        "inverter_model": "Fronius Primo 6.0",
        "inverter_quantity": 1,
        "total_price": "18.900,00",
    }), encoding="utf-8")
    return path


class TestCli:
    def test_sample(self, tmp_path):
        assert main(["-o", str(tmp_path), "sample"]) == 0
        assert (tmp_path / "proposta_João_Silva_Santos.pdf").exists()

    def test_generate(self, tmp_path, proposal_file):
        out = tmp_path / "out"
        assert main(["-o", str(out), "generate", str(proposal_file)]) == 0
        assert (out / "proposta_Ana_Paula_Souza.pdf").read_bytes().startswith(b"%PDF")

    def test_generate_corporate_variant(self, tmp_path, proposal_file):
        assert main(["-o", str(tmp_path), "--variant", "corporate", "generate", str(proposal_file)]) == 0

    def test_missing_file(self, tmp_path):
        assert main(["-o", str(tmp_path), "generate", str(tmp_path / "nope.json")]) == 1

    def test_invalid_json(self, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text("{", encoding="utf-8")
        assert main(["-o", str(tmp_path), "generate", str(bad)]) == 1

    def test_invalid_proposal(self, tmp_path, capsys):
        incomplete = tmp_path / "incomplete.json"
        incomplete.write_text(json.dumps({"client_name": "Ana"}), encoding="utf-8")

        assert main(["-o", str(tmp_path), "generate", str(incomplete)]) == 1
        assert "module_model is required" in capsys.readouterr().err
