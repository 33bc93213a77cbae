from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

SETTINGS_YAML = """
environment: prod
target_group_header: X-Target-Group
analytics_key: UA-1234
webspaces:
  - key: corp
    name: Corporate
    localizations:
      - language: en
        default: true
      - language: de
      - language: fr
    portals:
      - key: corp-portal
        name: Corporate Portal
        localizations:
          - language: en
            default: true
          - language: de
        environments:
          - type: prod
            urls:
              - url: corp.example.com/{localization}
          - type: dev
            urls:
              - url: corp.lo/{localization}
content:
  - id: "42"
    webspace: corp
    locale: en
    title: Hello
    data:
      intro: Welcome to the corporate site
  - id: "42"
    webspace: corp
    locale: fr
    title: Bonjour
  - id: "7"
    webspace: corp
    locale: en
    title: Home
    template: homepage
    data:
      teasers:
        - title: About
          url: about
"""


@pytest.fixture
def settings_path(tmp_path: Path) -> Path:
    path = tmp_path / "preview.yaml"
    path.write_text(SETTINGS_YAML.strip(), encoding="utf-8")
    return path
