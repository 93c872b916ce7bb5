"""
CSV export and dialer feed tests.
"""

import csv
import io

from clinicacrm.models import CaseChannel, CaseStatus

from conftest import at


def parse_csv(text):
    return list(csv.reader(io.StringIO(text)))


class TestExport:
    def test_csv_download(self, client, make_case, user, auth_headers):
        make_case(first_name="Anna", last_name="Neri", created_at=at(1))
        make_case(
            first_name="Luca",
            last_name="Bruno",
            phone="+39 333 1234567",
            status=CaseStatus.APPUNTAMENTO,
            assigned_to=user.id,
            dialer_campaign_tag="spring",
            created_at=at(2),
        )

        response = client.post("/api/export", json={"filters": {}}, headers=auth_headers)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        disposition = response.headers["content-disposition"]
        assert disposition.startswith('attachment; filename="cases-export-')
        assert disposition.endswith('.csv"')

        rows = parse_csv(response.text)
        assert rows[0] == [
            "ID", "First Name", "Last Name", "Phone", "Email", "Channel", "Origin",
            "Status", "Outcome", "Clinic", "Treatment", "Promotion", "Created At",
            "Follow Up Date", "Assigned To", "Dialer Campaign Tag",
        ]
        assert len(rows) == 3
        newest = rows[1]
        assert newest[1:4] == ["Luca", "Bruno", "+39 333 1234567"]
        assert newest[7] == "APPUNTAMENTO"
        assert newest[14] == "Giulia Bianchi"
        assert newest[15] == "spring"

    def test_every_cell_quoted(self, client, make_case, auth_headers):
        make_case()
        response = client.post("/api/export", json={}, headers=auth_headers)
        first_line = response.text.splitlines()[0]
        assert first_line.startswith('"ID","First Name"')

    def test_filters(self, client, make_case, auth_headers):
        make_case(email="anna@mail.it", channel=CaseChannel.FACEBOOK)
        make_case(email="anna@other.it", channel=CaseChannel.WEB)
        make_case(email="paolo@mail.it", channel=CaseChannel.FACEBOOK)

        response = client.post(
            "/api/export",
            json={"filters": {"search": "anna", "channel": "FACEBOOK"}},
            headers=auth_headers,
        )
        rows = parse_csv(response.text)
        assert len(rows) == 2
        assert rows[1][4] == "anna@mail.it"

    def test_read_key_allowed(self, client, make_case, make_api_key):
        make_case()
        secret, _ = make_api_key(permissions=["read"])
        response = client.post("/api/export", json={}, headers={"X-API-Key": secret})
        assert response.status_code == 200


class TestDialer:
    def test_leads_for_campaign(self, client, make_case, auth_headers):
        italian = make_case(phone="333 1234567", dialer_campaign_tag="spring")
        spanish = make_case(phone=None, cell_phone="+34 612 345 678", dialer_campaign_tag="spring")
        make_case(phone=None, dialer_campaign_tag="spring")
        make_case(phone="333 7654321", dialer_campaign_tag="autumn")

        response = client.post("/api/dialer", json={"campaign_tag_filter": "spring"}, headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["count"] == 2
        assert body["leads"] == [
            {"record_id": italian.id, "phone_e164": "+393331234567"},
            {"record_id": spanish.id, "phone_e164": "+34612345678"},
        ]

    def test_unknown_campaign(self, client, make_case, auth_headers):
        make_case(phone="333 1234567", dialer_campaign_tag="spring")
        response = client.post("/api/dialer", json={"campaign_tag_filter": "winter"}, headers=auth_headers)
        assert response.json() == {"success": True, "leads": [], "count": 0}

    def test_tag_required(self, client, auth_headers):
        for payload in ({}, {"campaign_tag_filter": "  "}):
            response = client.post("/api/dialer", json=payload, headers=auth_headers)
            assert response.status_code == 400
            assert response.json()["message"] == "campaign_tag_filter is required"
