"""Tests for the row transformer."""

import uuid

from bizense.core.columns import COLUMN_ALIASES, get_field
from bizense.core.transform import derive_product_name, transform_row

USER = uuid.UUID("00000000-0000-0000-0000-000000000001")


class TestDeriveProductName:
    def test_split_on_delimiter(self):
        assert derive_product_name("ProductX - Summer") == "ProductX"

    def test_only_first_delimiter(self):
        assert derive_product_name("Mug - Summer - Retargeting") == "Mug"

    def test_no_delimiter(self):
        assert derive_product_name("Brand Awareness") == "Brand Awareness"

    def test_hyphen_without_spaces_is_not_delimiter(self):
        assert derive_product_name("T-Shirt") == "T-Shirt"

    def test_empty(self):
        assert derive_product_name("") == ""


class TestTransformRow:
    def test_facebook_scenario(self):
        row = {"Campaign name": "ProductX - Summer", "Amount spent (CAD)": "$12.50", "Purchases": "3"}
        record = transform_row(row, USER, "facebook", "fb.csv")
        assert record.product_name == "ProductX"
        assert record.campaign_name == "ProductX - Summer"
        assert record.amount_spent == 12.50
        assert record.conversions == 3
        assert record.revenue == 0.0
        assert record.platform == "facebook"
        assert record.user_id == USER
        assert record.file_name == "fb.csv"

    def test_explicit_product_column_wins(self):
        row = {"Campaign name": "ProductX - Summer", "Product": "Widget"}
        assert transform_row(row, USER, "google", "g.csv").product_name == "Widget"

    def test_raw_row_preserved(self):
        row = {"Campaign": "A - B", "Spend": "abc", "Extra": "kept"}
        record = transform_row(row, USER, "tiktok", "t.csv")
        assert record.raw_data == row
        assert record.raw_data is not row
        assert record.amount_spent == 0.0

    def test_missing_everything_still_produces_record(self):
        record = transform_row({"Unrelated": "1"}, USER, "tiktok", "t.csv")
        assert record.product_name == ""
        assert record.campaign_name == ""
        assert record.clicks == 0.0

    def test_revenue_from_product_setting_when_absent(self):
        row = {"Campaign name": "Mug - Q1", "Purchases": "4"}
        record = transform_row(row, USER, "facebook", "f.csv", revenue_per_conversion={"Mug": 12.5})
        assert record.revenue == 50.0

    def test_revenue_column_beats_product_setting(self):
        row = {"Campaign name": "Mug - Q1", "Purchases": "4", "Revenue": "$30"}
        record = transform_row(row, USER, "facebook", "f.csv", revenue_per_conversion={"Mug": 12.5})
        assert record.revenue == 30.0

    def test_upload_id_carried(self):
        upload_id = uuid.uuid4()
        record = transform_row({}, USER, "google", "g.csv", upload_id=upload_id)
        assert record.upload_id == upload_id
        assert record.to_row()["upload_id"] == upload_id

    def test_canonical_names_round_trip(self):
        row = {
            "campaign_name": "Lamp - Launch",
            "product_name": "Lamp",
            "amount_spent": "10.5",
            "revenue": "42",
            "conversions": "2",
            "clicks": "9",
            "impressions": "300",
        }
        record = transform_row(row, USER, "google", "g.csv")
        for field in COLUMN_ALIASES:
            assert get_field(record.raw_data, field) == row[field]
        assert record.amount_spent == 10.5
        assert record.impressions == 300.0
