# Overview: Pytest coverage for shop mutations, form parsing and image upload handling.

import io

import pytest

from shopmapper.extensions import db
from shopmapper.models import Shop
from shopmapper.services.shop_service import parse_shop_form
from shopmapper.validation import ValidationError


def shop_form(route_id, **overrides):
    form = {
        "name": "Sunrise Grocery",
        "ownerName": "K. Perera",
        "contactNumber": "0771234567",
        "paymentMethod": "CASH",
        "paymentStatus": "ON_TIME",
        "avgBillValue": "2500.50",
        "routeId": str(route_id),
        "latitude": "6.0535",
        "longitude": "80.2210",
    }
    form.update(overrides)
    return form


def with_image(form, data=b"\x89PNG fake image bytes", filename="front.png"):
    return {**form, "image": (io.BytesIO(data), filename, "image/png")}


class TestParseShopForm:
    def test_defaults(self):
        fields = parse_shop_form({
            "name": "Corner Shop", "routeId": "3", "latitude": "6.1", "longitude": "80.1",
        })
        assert fields["payment_method"] == "CASH"
        assert fields["payment_status"] == "ON_TIME"
        assert fields["avg_bill_value"] == 0.0
        assert fields["credit_period"] is None
        assert fields["owner_name"] is None
        assert fields["route_id"] == 3

    def test_credit_period_kept_for_credit(self):
        fields = parse_shop_form(shop_form(1, paymentMethod="credit", creditPeriod="30"))
        assert fields["payment_method"] == "CREDIT"
        assert fields["credit_period"] == 30

    def test_credit_period_dropped_for_cash(self):
        fields = parse_shop_form(shop_form(1, paymentMethod="CASH", creditPeriod="30"))
        assert fields["credit_period"] is None

    def test_blank_credit_period_is_null(self):
        fields = parse_shop_form(shop_form(1, paymentMethod="CREDIT", creditPeriod=""))
        assert fields["credit_period"] is None

    def test_negative_credit_period_rejected(self):
        with pytest.raises(ValidationError):
            parse_shop_form(shop_form(1, paymentMethod="CREDIT", creditPeriod="-5"))

    @pytest.mark.parametrize(
        "latitude,longitude",
        [("", "80.2"), ("6.0", "abc"), ("nan", "80.2"), ("91", "80.2"), ("6.0", "-181")],
    )
    def test_invalid_location(self, latitude, longitude):
        with pytest.raises(ValidationError, match="Invalid Location"):
            parse_shop_form(shop_form(1, latitude=latitude, longitude=longitude))

    @pytest.mark.parametrize(
        "overrides",
        [
            {"name": ""},
            {"routeId": ""},
            {"paymentMethod": "BARTER"},
            {"paymentStatus": "SOMETIMES"},
            {"avgBillValue": "lots"},
        ],
    )
    def test_invalid_fields(self, overrides):
        with pytest.raises(ValidationError):
            parse_shop_form(shop_form(1, **overrides))


class TestCreateShop:
    def test_rep_creates_shop_with_image(self, rep_client, seed, uploader):
        route_id = seed["routes"]["Route 1"].id
        resp = rep_client.post(
            "/api/shops",
            data=with_image(shop_form(route_id)),
            content_type="multipart/form-data",
        )
        assert resp.status_code == 201

        shop = resp.get_json()["shop"]
        assert shop["name"] == "Sunrise Grocery"
        assert shop["avg_bill_value"] == 2500.5
        assert shop["image_url"].endswith("/front.png")
        assert uploader.calls == [("front.png", "image/png", len(b"\x89PNG fake image bytes"))]

    def test_upload_failure_still_saves_shop(self, rep_client, seed, uploader):
        uploader.fail = True
        route_id = seed["routes"]["Route 1"].id
        resp = rep_client.post(
            "/api/shops",
            data=with_image(shop_form(route_id)),
            content_type="multipart/form-data",
        )
        assert resp.status_code == 201
        assert resp.get_json()["shop"]["image_url"] is None
        assert db.session.query(Shop).filter_by(name="Sunrise Grocery").count() == 1

    def test_no_image_skips_upload(self, admin_client, seed, uploader):
        route_id = seed["routes"]["Route 2"].id
        resp = admin_client.post("/api/shops", data=shop_form(route_id))
        assert resp.status_code == 201
        assert resp.get_json()["shop"]["image_url"] is None
        assert uploader.calls == []

    def test_invalid_location_is_400(self, rep_client, seed):
        route_id = seed["routes"]["Route 1"].id
        before = db.session.query(Shop).count()
        resp = rep_client.post("/api/shops", data=shop_form(route_id, latitude="north"))
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Invalid Location"
        assert db.session.query(Shop).count() == before

    def test_unknown_route_is_400(self, rep_client, seed):
        resp = rep_client.post("/api/shops", data=shop_form(999999))
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Route not found"

    def test_unknown_route_uploads_nothing(self, rep_client, seed, uploader):
        resp = rep_client.post(
            "/api/shops",
            data=with_image(shop_form(999999)),
            content_type="multipart/form-data",
        )
        assert resp.status_code == 400
        assert uploader.calls == []

    def test_oversized_upload_is_413(self, app, rep_client, seed, uploader):
        route_id = seed["routes"]["Route 1"].id
        before = db.session.query(Shop).count()
        app.config["MAX_CONTENT_LENGTH"] = 1024
        try:
            resp = rep_client.post(
                "/api/shops",
                data=with_image(shop_form(route_id), data=b"x" * 4096),
                content_type="multipart/form-data",
            )
        finally:
            app.config["MAX_CONTENT_LENGTH"] = 10 * 1024 * 1024
        assert resp.status_code == 413
        assert uploader.calls == []
        assert db.session.query(Shop).count() == before

    def test_rep_may_record_shop_on_any_route(self, rep_client, seed):
        # Shop mutations are role-gated only
        route_id = seed["routes"]["Route 4"].id
        resp = rep_client.post("/api/shops", data=shop_form(route_id))
        assert resp.status_code == 201


class TestUpdateShop:
    def test_update_keeps_image_without_new_file(self, rep_client, seed):
        shop_id = seed["shops"]["Shop 1"].id
        shop = db.session.get(Shop, shop_id)
        shop.image_url = "https://res.cloudinary.com/test/image/upload/shop-mapper/old.png"
        db.session.commit()

        route_id = seed["routes"]["Route 1"].id
        resp = rep_client.put(
            f"/api/shops/{shop_id}",
            data=shop_form(route_id, name="Shop 1 Renamed", paymentMethod="CREDIT", creditPeriod="14"),
        )
        assert resp.status_code == 200
        body = resp.get_json()["shop"]
        assert body["name"] == "Shop 1 Renamed"
        assert body["credit_period"] == 14
        assert body["image_url"].endswith("/old.png")

    def test_update_replaces_image(self, admin_client, seed, uploader):
        shop_id = seed["shops"]["Shop 2"].id
        route_id = seed["routes"]["Route 2"].id
        resp = admin_client.put(
            f"/api/shops/{shop_id}",
            data=with_image(shop_form(route_id), filename="new.png"),
            content_type="multipart/form-data",
        )
        assert resp.status_code == 200
        assert resp.get_json()["shop"]["image_url"].endswith("/new.png")

    def test_failed_upload_keeps_old_image(self, admin_client, seed, uploader):
        shop_id = seed["shops"]["Shop 2"].id
        shop = db.session.get(Shop, shop_id)
        shop.image_url = "https://res.cloudinary.com/test/image/upload/shop-mapper/kept.png"
        db.session.commit()

        uploader.fail = True
        route_id = seed["routes"]["Route 2"].id
        resp = admin_client.put(
            f"/api/shops/{shop_id}",
            data=with_image(shop_form(route_id)),
            content_type="multipart/form-data",
        )
        assert resp.status_code == 200
        assert resp.get_json()["shop"]["image_url"].endswith("/kept.png")

    def test_switching_to_cash_clears_credit_period(self, admin_client, seed):
        shop_id = seed["shops"]["Shop 3"].id
        route_id = seed["routes"]["Route 3"].id
        admin_client.put(f"/api/shops/{shop_id}", data=shop_form(route_id, paymentMethod="CREDIT", creditPeriod="30"))
        resp = admin_client.put(f"/api/shops/{shop_id}", data=shop_form(route_id, paymentMethod="CHEQUE", creditPeriod="30"))
        assert resp.status_code == 200
        assert resp.get_json()["shop"]["credit_period"] is None

    def test_update_missing_shop(self, admin_client, seed):
        route_id = seed["routes"]["Route 1"].id
        resp = admin_client.put("/api/shops/999999", data=shop_form(route_id))
        assert resp.status_code == 404

    def test_missing_shop_uploads_nothing(self, admin_client, seed, uploader):
        route_id = seed["routes"]["Route 1"].id
        resp = admin_client.put(
            "/api/shops/999999",
            data=with_image(shop_form(route_id)),
            content_type="multipart/form-data",
        )
        assert resp.status_code == 404
        assert uploader.calls == []

    def test_unknown_route_on_update_uploads_nothing(self, admin_client, seed, uploader):
        shop_id = seed["shops"]["Shop 1"].id
        resp = admin_client.put(
            f"/api/shops/{shop_id}",
            data=with_image(shop_form(999999)),
            content_type="multipart/form-data",
        )
        assert resp.status_code == 400
        assert uploader.calls == []


class TestDeleteShop:
    def test_admin_deletes_shop(self, admin_client, seed):
        shop_id = seed["shops"]["Shop 1"].id
        resp = admin_client.delete(f"/api/shops/{shop_id}")
        assert resp.status_code == 200
        db.session.expire_all()
        assert db.session.get(Shop, shop_id) is None

    def test_rep_cannot_delete_shop(self, rep_client, seed):
        shop_id = seed["shops"]["Shop 1"].id
        resp = rep_client.delete(f"/api/shops/{shop_id}")
        assert resp.status_code == 403
        assert db.session.get(Shop, shop_id) is not None

    def test_delete_missing_shop(self, admin_client, seed):
        assert admin_client.delete("/api/shops/999999").status_code == 404
