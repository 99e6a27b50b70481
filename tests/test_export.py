import json

import pandas as pd

from core.state import Campaign
from utils.export import HISTORY_COLUMNS, export_campaign_pdf, export_history_csv, history_to_frame, section_title, strip_unsupported


def _campaign(name, ts):
    return Campaign(
        campaign_name=name,
        timestamp=ts,
        assets_generated=["Website Copy Suite", "Video Scripts"],
        details={"websiteCopySuite": {"heroSection": {"headline": "Release on autopilot — finally"}}, "videoScripts": "Open X..."},
    )


def test_history_frame_keeps_order():
    df = history_to_frame([_campaign("first", 1000), _campaign("second", 2000)])
    assert list(df.columns) == HISTORY_COLUMNS
    assert list(df["campaignName"]) == ["first", "second"]
    assert df.loc[0, "assetsGenerated"] == "Website Copy Suite; Video Scripts"
    assert json.loads(df.loc[1, "details"])["videoScripts"] == "Open X..."


def test_empty_history_frame_has_columns():
    df = history_to_frame([])
    assert df.empty
    assert list(df.columns) == HISTORY_COLUMNS


def test_export_history_csv(tmp_path):
    path = export_history_csv([_campaign("first", 1000)], str(tmp_path / "exports" / "history.csv"))
    df = pd.read_csv(path)
    assert list(df.columns) == HISTORY_COLUMNS
    assert df.loc[0, "timestamp"] == 1000


def test_export_campaign_pdf(tmp_path):
    path = export_campaign_pdf(_campaign("Campaign - 03/05/2024, 02:30:15 PM", 1709649015000), str(tmp_path / "c.pdf"))
    with open(path, "rb") as f:
        assert f.read(4) == b"%PDF"


def test_strip_unsupported():
    assert strip_unsupported("“Hi” — it’s \U0001F680") == "\"Hi\" - it's "


def test_section_title():
    assert section_title("websiteCopySuite") == "Website Copy Suite"
