# -*- coding: utf-8 -*-
"""
Car Suite | Export Module

Plain row-of-fields export, CSV serialization, car comparison table and
the executive PDF report.
"""

from __future__ import annotations
import csv
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd
from fpdf import FPDF
from fpdf.enums import XPos, YPos

from car_suite.analytics import calculate_kpis, get_brand_performance_data
from car_suite.config import (
    COL_CAPACITY,
    COL_ENGINE,
    COL_SEATS,
    TOP_BRANDS,
)
from car_suite.data import Records, as_frame


# ==============================================================================
# FORMAT UTILITIES
# ==============================================================================

def human_money(x: float) -> str:
    """Format number as human-readable money."""
    try:
        if abs(x) >= 1e9:
            return f"${x/1e9:,.2f} B"
        if abs(x) >= 1e6:
            return f"${x/1e6:,.2f} M"
        return f"${x:,.0f}"
    except (TypeError, ValueError):
        return str(x)


def pdf_sanitize(text) -> str:
    """Sanitize text for the core PDF fonts (latin-1 encoding)."""
    return str(text).encode("latin-1", "replace").decode("latin-1")


# ==============================================================================
# TABULAR EXPORT
# ==============================================================================

def records_to_rows(records: Records) -> Tuple[List[str], List[List[Any]]]:
    """Headers plus one list of field values per record."""
    df = as_frame(records)
    if df.empty:
        return [], []
    headers = [str(c) for c in df.columns]
    rows = df.astype(object).where(df.notna(), None).values.tolist()
    return headers, rows


def to_csv_bytes(records: Records) -> bytes:
    """Comma-separated text with string fields quoted, built from records_to_rows()."""
    headers, rows = records_to_rows(records)
    if not headers:
        return b""
    return pd.DataFrame(rows, columns=headers).to_csv(index=False, quoting=csv.QUOTE_NONNUMERIC).encode("utf-8")


COMPARISON_SPECS = [
    (COL_ENGINE, "Engine"),
    (COL_CAPACITY, "CC/Battery"),
    ("horsePower", "Horsepower"),
    ("torque", "Torque"),
    ("totalSpeed", "Top Speed"),
    ("performance", "0-100 km/h"),
    ("fuelType", "Fuel Type"),
    (COL_SEATS, "Seats"),
    ("price", "Price"),
]


def car_id(record: Dict[str, Any]) -> str:
    return f"{record.get('companyName')}-{record.get('modelName')}"


def find_car(records: Records, wanted_id: str) -> Optional[Dict[str, Any]]:
    """First record whose "<company>-<model>" id matches, else None."""
    df = as_frame(records)
    for rec in df.to_dict(orient="records"):
        if car_id(rec) == wanted_id:
            return rec
    return None


def comparison_table(records: Records, limit: int = 3) -> pd.DataFrame:
    """One row per specification, one column per car (first `limit` cars)."""
    df = as_frame(records).head(limit)
    cars = df.to_dict(orient="records")
    rows = []
    for key, label in COMPARISON_SPECS:
        row = {"specification": label}
        for i, car in enumerate(cars, start=1):
            value = car.get(key)
            row[f"car_{i}"] = human_money(value) if key == "price" and value is not None else value
        rows.append(row)
    return pd.DataFrame(rows)


# ==============================================================================
# PDF CLASS
# ==============================================================================

class ExecutivePDF(FPDF):
    """Custom PDF class with header/footer for executive reports."""

    def header(self):
        self.set_font("Helvetica", "B", 13)
        self.set_text_color(30, 55, 153)
        self.cell(0, 8, "Car Market Report", new_x=XPos.LMARGIN, new_y=YPos.NEXT, align="C")
        self.ln(2)

    def footer(self):
        self.set_y(-14)
        self.set_font("Helvetica", "I", 8)
        self.set_text_color(120)
        generated = datetime.now().strftime("%Y-%m-%d %H:%M")
        self.cell(0, 10, f"Page {self.page_no()} | Generated {generated}", align="C")


# ==============================================================================
# PDF BUILDER
# ==============================================================================

def build_pdf_bytes(records: Records, title: str, subtitle: str = "") -> bytes:
    """
    Build executive PDF report for a (filtered) set of cars.

    Args:
        records: Car records
        title: Report title
        subtitle: Report subtitle/description (e.g. active filter)

    Returns:
        PDF bytes ready for download
    """
    df = as_frame(records)
    kpis = calculate_kpis(df)

    pdf = ExecutivePDF(orientation="P", unit="mm", format="A4")
    pdf.add_page()

    # Title block
    pdf.set_font("Helvetica", "B", 16)
    pdf.set_text_color(0)
    pdf.cell(0, 10, pdf_sanitize(title), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    if subtitle:
        pdf.set_font("Helvetica", "I", 10)
        pdf.set_text_color(90)
        pdf.cell(0, 7, pdf_sanitize(subtitle), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(3)

    # KPI box
    y = pdf.get_y()
    pdf.set_fill_color(245, 245, 245)
    pdf.set_draw_color(220, 220, 220)
    pdf.rect(10, y, 190, 20, "FD")
    pdf.set_y(y + 5)
    pdf.set_font("Helvetica", "B", 11)
    pdf.set_text_color(0)
    pdf.cell(63, 8, pdf_sanitize(f"Vehicles: {kpis['totalVehicles']:,}"), align="C")
    pdf.cell(63, 8, pdf_sanitize(f"Avg price: {human_money(kpis['averagePrice'])}"), align="C")
    pdf.cell(63, 8, pdf_sanitize(f"Max price: {human_money(kpis['maxPrice'])}"), new_x=XPos.LMARGIN, new_y=YPos.NEXT, align="C")
    pdf.ln(10)

    top = get_brand_performance_data(df)[:TOP_BRANDS]
    pdf.set_font("Helvetica", "B", 12)
    pdf.set_text_color(30, 55, 153)
    if not top:
        pdf.set_font("Helvetica", "", 10)
        pdf.set_text_color(0)
        pdf.multi_cell(0, 6, "No vehicles match the current filters.")
        return bytes(pdf.output())

    pdf.cell(0, 8, f"Top {len(top)} brands by listings", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(1)

    pdf.set_font("Helvetica", "B", 9)
    pdf.set_text_color(255)
    pdf.set_fill_color(44, 62, 80)
    pdf.cell(80, 7, "Brand", border=1, fill=True)
    pdf.cell(30, 7, "Cars", border=1, align="R", fill=True)
    pdf.cell(45, 7, "Avg price", border=1, align="R", fill=True)
    pdf.cell(35, 7, "Avg HP", border=1, align="R", fill=True, new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    pdf.set_font("Helvetica", "", 9)
    pdf.set_text_color(0)
    alt = False
    for b in top:
        if alt:
            pdf.set_fill_color(240, 240, 240)
        else:
            pdf.set_fill_color(255, 255, 255)
        pdf.cell(80, 7, pdf_sanitize(b["brand"])[:40], border=1, fill=alt)
        pdf.cell(30, 7, f"{b['carCount']:,}", border=1, align="R", fill=alt)
        pdf.cell(45, 7, pdf_sanitize(human_money(b["averagePrice"])), border=1, align="R", fill=alt)
        pdf.cell(35, 7, f"{b['averageHorsePower']:,.0f}", border=1, align="R", fill=alt, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        alt = not alt

    return bytes(pdf.output())
