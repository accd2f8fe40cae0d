from datetime import date, timedelta
from decimal import Decimal


def test_create_job_assigns_number_and_estimate(job, this_year):
    assert job["job_number"] == f"JOB-{this_year}-001"
    assert job["status"] == "pending"
    assert job["priority"] == "normal"
    assert job["progress_percentage"] == 10
    assert Decimal(job["estimated_cost"]) == Decimal("502.75")
    assert job["company_name"] == "Acme Pumps"
    assert job["motor_motor_id"] == "M-1042"


def test_job_numbers_are_sequential(make_job, this_year):
    numbers = [make_job()["job_number"] for _ in range(3)]
    assert numbers == [f"JOB-{this_year}-{n:03d}" for n in (1, 2, 3)]


def test_blank_form_fields_are_accepted_as_null(make_job):
    job = make_job(technician_id="", due_date="", labor_hours="", notes="")
    assert job["technician_id"] is None
    assert job["due_date"] is None
    assert job["labor_hours"] is None
    assert job["days_until_due"] is None
    assert Decimal(job["estimated_cost"]) == Decimal("0")


def test_due_date_before_start_date_is_rejected(client, company, motor):
    response = client.post("/api/v1/jobs/", json={
        "company_id": company["id"],
        "motor_id": motor["id"],
        "description": "Balance rotor",
        "start_date": "2025-03-10",
        "due_date": "2025-03-01",
    })
    assert response.status_code == 422


def test_motor_must_belong_to_company(client, other_company, motor):
    response = client.post("/api/v1/jobs/", json={
        "company_id": other_company["id"],
        "motor_id": motor["id"],
        "description": "Balance rotor",
    })
    assert response.status_code == 400
    assert "does not belong" in response.json()["detail"]


def test_motor_is_required(client, company):
    response = client.post("/api/v1/jobs/", json={"company_id": company["id"], "description": "Balance rotor"})
    assert response.status_code == 422


def test_only_technicians_can_be_assigned(client, company, motor):
    office = client.post("/api/v1/users/", json={
        "name": "Pat Lee", "email": "pat@motorshop.com", "role": "office"
    }).json()
    response = client.post("/api/v1/jobs/", json={
        "company_id": company["id"],
        "motor_id": motor["id"],
        "technician_id": office["id"],
        "description": "Balance rotor",
    })
    assert response.status_code == 400


def test_update_recomputes_estimate(client, job):
    response = client.put(f"/api/v1/jobs/{job['id']}", json={"labor_hours": "6"})
    assert response.status_code == 200
    data = response.json()
    assert Decimal(data["estimated_cost"]) == Decimal("630.25")
    assert data["job_number"] == job["job_number"]


def test_update_with_due_before_start_is_rejected(client, make_job):
    job = make_job(start_date="2025-03-01", due_date="2025-03-10")
    response = client.put(f"/api/v1/jobs/{job['id']}", json={"due_date": "2025-02-20"})
    assert response.status_code == 400
    assert client.get(f"/api/v1/jobs/{job['id']}").json()["due_date"] == "2025-03-10"


def test_status_lifecycle(client, job):
    url = f"/api/v1/jobs/{job['id']}/status"

    assert client.patch(url, json={"status": "completed"}).status_code == 400

    started = client.patch(url, json={"status": "in_progress"}).json()
    assert started["progress_percentage"] == 50

    completed = client.patch(url, json={"status": "completed"}).json()
    assert completed["status"] == "completed"
    assert completed["progress_percentage"] == 85
    assert completed["completed_date"] == date.today().isoformat()

    delivered = client.patch(url, json={"status": "delivered", "notes": "Picked up"}).json()
    assert delivered["progress_percentage"] == 100
    assert delivered["notes"] == "Picked up"


def test_progress_override(client, job):
    response = client.put(f"/api/v1/jobs/{job['id']}", json={"progress_percentage": 30})
    assert response.json()["progress_percentage"] == 30


def test_due_flags(make_job):
    today = date.today()
    overdue = make_job(due_date=(today - timedelta(days=1)).isoformat())
    due_soon = make_job(due_date=(today + timedelta(days=2)).isoformat())
    later = make_job(due_date=(today + timedelta(days=3)).isoformat())

    assert overdue["is_overdue"] is True
    assert overdue["days_until_due"] == -1
    assert due_soon["is_due_soon"] is True
    assert later["is_due_soon"] is False
    assert later["is_overdue"] is False


def test_job_stats(client, make_job):
    today = date.today()
    make_job(due_date=(today - timedelta(days=5)).isoformat())
    make_job(due_date=today.isoformat())
    started = make_job()
    client.patch(f"/api/v1/jobs/{started['id']}/status", json={"status": "in_progress"})

    stats = client.get("/api/v1/jobs/stats/summary").json()
    assert stats["total_jobs"] == 3
    assert stats["pending"] == 2
    assert stats["in_progress"] == 1
    assert stats["overdue"] == 1
    assert stats["due_soon"] == 1


def test_list_jobs_paginates(client, make_job):
    for _ in range(3):
        make_job()

    data = client.get("/api/v1/jobs/", params={"limit": 2}).json()
    assert data["total"] == 3
    assert len(data["items"]) == 2
    assert data["total_pages"] == 2
    assert data["page"] == 1

    second = client.get("/api/v1/jobs/", params={"limit": 2, "skip": 2}).json()
    assert second["page"] == 2
    assert len(second["items"]) == 1


def test_list_jobs_filters(client, make_job):
    first = make_job(priority="urgent", description="Replace brushes")
    make_job()

    urgent = client.get("/api/v1/jobs/", params={"priority": "urgent"}).json()
    assert [j["id"] for j in urgent["items"]] == [first["id"]]

    by_text = client.get("/api/v1/jobs/", params={"search": "brushes"}).json()
    assert by_text["total"] == 1

    by_company = client.get("/api/v1/jobs/", params={"search": "acme"}).json()
    assert by_company["total"] == 2

    pending = client.get("/api/v1/jobs/", params={"status": "pending"}).json()
    assert pending["total"] == 2


def test_get_job_by_number(client, job):
    response = client.get(f"/api/v1/jobs/number/{job['job_number']}")
    assert response.status_code == 200
    assert response.json()["id"] == job["id"]
    assert client.get("/api/v1/jobs/number/JOB-1999-001").status_code == 404


def test_deleted_motor_leaves_job_without_motor(client, job, motor):
    assert client.delete(f"/api/v1/motors/{motor['id']}").status_code == 200

    reloaded = client.get(f"/api/v1/jobs/{job['id']}").json()
    assert reloaded["motor_id"] is None
    assert reloaded["motor_motor_id"] is None
    assert reloaded["company_name"] == "Acme Pumps"


def test_delete_job(client, job):
    assert client.delete(f"/api/v1/jobs/{job['id']}").status_code == 200
    assert client.get(f"/api/v1/jobs/{job['id']}").status_code == 404
