from __future__ import annotations

from datetime import date, timedelta

import pytest

import renewals
from renewal_backend.services import activity_svc, renewal_svc


def test_cli_end_to_end(capsys):
    end = (date.today() + timedelta(days=10)).isoformat()
    renewals.main(["init"])
    renewals.main(["add-client", "--name", "Acme", "--email", "a@acme.test"])
    renewals.main(["add-service", "--name", "Hosting", "--price", "99", "--duration", "12"])
    renewals.main(["add-renewal", "--client-id", "1", "--service-id", "1", "--end", end])
    out = capsys.readouterr().out
    assert "Renewal created: 1" in out

    r = renewal_svc.get_renewal(1)
    assert r["amount"] == 99
    assert r["end_date"] == end

    renewals.main(["mark-paid", "1"])
    renewals.main(["notify", "1"])
    renewals.main(["stats"])
    out = capsys.readouterr().out
    assert "total_revenue" in out and "99.0" in out

    assert [a["type"] for a in activity_svc.list_activities()] == [
        "notification_sent", "renewal_updated", "payment_received", "renewal_created",
    ]


def test_cli_missing_renewal_exits():
    with pytest.raises(SystemExit):
        renewals.main(["delete-renewal", "999"])
