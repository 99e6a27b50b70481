import os
import re
import json
import logging
from datetime import datetime
from typing import Iterable

import pandas as pd
from fpdf import FPDF
from fpdf.enums import XPos, YPos

from core.state import Campaign

HISTORY_COLUMNS = ["campaignName", "timestamp", "generatedAt", "assetsGenerated", "details"]

logger = logging.getLogger(__name__)


def history_to_frame(history: Iterable[Campaign]) -> pd.DataFrame:
    """One row per campaign, in history order."""
    rows = []
    for campaign in history:
        rows.append({
            "campaignName": campaign.campaign_name,
            "timestamp": campaign.timestamp,
            "generatedAt": datetime.fromtimestamp(campaign.timestamp / 1000).isoformat(timespec="seconds"),
            "assetsGenerated": "; ".join(campaign.assets_generated),
            "details": json.dumps(campaign.details),
        })
    return pd.DataFrame(rows, columns=HISTORY_COLUMNS)


def export_history_csv(history: Iterable[Campaign], path: str) -> str:
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    df = history_to_frame(history)
    df.to_csv(path, index=False)
    logger.info(f"Exported {len(df)} campaigns to {path}")
    return path


def strip_unsupported(text: str) -> str:
    # Replace curly quotes and dashes with ASCII equivalents
    text = re.sub(r"[‘’]", "'", text)
    text = re.sub(r"[“”]", '"', text)
    text = text.replace("–", "-").replace("—", "-")
    # Remove characters not supported by latin-1
    return ''.join(c for c in text if ord(c) < 256)


def section_title(key: str) -> str:
    """'websiteCopySuite' -> 'Website Copy Suite'"""
    spaced = re.sub(r"([A-Z])", r" \1", key).strip()
    return spaced[:1].upper() + spaced[1:]


def export_campaign_pdf(campaign: Campaign, path: str) -> str:
    pdf = FPDF()
    pdf.add_page()

    pdf.set_font("Helvetica", style='B', size=16)
    pdf.cell(0, 10, strip_unsupported(campaign.campaign_name), new_x=XPos.LMARGIN, new_y=YPos.NEXT, align='C')
    pdf.set_font("Helvetica", size=10)
    pdf.set_text_color(100)
    generated = datetime.fromtimestamp(campaign.timestamp / 1000).strftime("%Y-%m-%d %H:%M:%S")
    pdf.cell(0, 8, f"Generated on: {generated}", new_x=XPos.LMARGIN, new_y=YPos.NEXT, align='C')
    pdf.cell(0, 8, strip_unsupported(f"Assets: {', '.join(campaign.assets_generated)}"), new_x=XPos.LMARGIN, new_y=YPos.NEXT, align='C')
    pdf.ln(6)

    for key, content in campaign.details.items():
        pdf.set_text_color(0)
        pdf.set_font("Helvetica", style='B', size=13)
        pdf.cell(0, 10, strip_unsupported(section_title(key)), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_font("Courier", size=9)
        body = content if isinstance(content, str) else json.dumps(content, indent=2)
        pdf.multi_cell(0, 5, strip_unsupported(body), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.ln(4)

    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    pdf.output(path)
    logger.info(f"Exported {campaign.campaign_name} to {path}")
    return path
