from __future__ import annotations

import pytest

from ofx_enricher.config import generate_default_config, load_config
from ofx_enricher.utils.exceptions import ConfigurationError


def test_defaults():
    config = load_config(None)

    assert config.enrichment.wave_size == 10
    assert config.enrichment.decoder == "structured"
    assert config.enrichment.memo_prefix == "Osko Payment From "
    assert config.output.filename_template == "bankAustralia-{month:02d}-{year}.ofx"
    assert config.config_file_path is None


def test_yaml_overrides_merge_with_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("enrichment:\n  wave_size: 4\n  decoder: regex\n", encoding="utf-8")

    config = load_config(path)

    assert config.enrichment.wave_size == 4
    assert config.enrichment.decoder == "regex"
    assert config.enrichment.separator == " - "
    assert config.config_file_path == str(path)


def test_generated_config_loads(tmp_path):
    path = tmp_path / "nested" / "config.yaml"
    generate_default_config(path)

    config = load_config(path)
    assert config.bank.payment_path == "npp/GetPayment"


@pytest.mark.parametrize(
    "content",
    [
        "enrichment: [unclosed\n",
        "- just\n- a list\n",
        "enrichment:\n  wave_size: 0\n",
        "enrichment:\n  decoder: jq\n",
    ],
)
def test_invalid_config(tmp_path, content):
    path = tmp_path / "config.yaml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_config(path)
