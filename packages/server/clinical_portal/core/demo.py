"""Demo tenant loaded into the in-memory backend when ``PORTAL_SEED_DEMO_DATA`` is on."""

from __future__ import annotations

from datetime import date, datetime, timezone

import structlog

from clinical_portal.core.identity import MockIdentityProvider
from clinical_portal.core.mock_datasource import MockDataSource

log = structlog.get_logger()

DEMO_PASSWORD = "kachina-demo"

DEMO_USERS = (
    ("admin@kachinahealth.com", "Demo Admin", "admin"),
    ("doctor@kachinahealth.com", "Dr. Demo Doctor", "doctor"),
    ("user@kachinahealth.com", "Demo Coordinator", "user"),
)

HOSPITALS = (
    ("City General Hospital", "New York, NY", "Dr. Michael Johnson", 150, 120, 80.00),
    ("Metro Medical Center", "Los Angeles, CA", "Dr. Sarah Williams", 200, 180, 90.00),
    ("Regional Health System", "Chicago, IL", "Dr. Robert Brown", 125, 100, 80.00),
)

SETTINGS = (
    ("company_name", "KachinaHealth", "string", "Company name displayed in dashboard"),
    ("company_logo_url", "/logos/logo.png", "string", "URL to company logo"),
    ("default_user_role", "user", "string", "Default role for new users"),
    ("enable_analytics", "true", "boolean", "Enable user analytics tracking"),
    ("maintenance_mode", "false", "boolean", "Enable maintenance mode"),
    ("max_upload_size", "10", "number", "Maximum file upload size in MB"),
)


def seed_demo_data(datasource: MockDataSource, identity: MockIdentityProvider) -> None:
    org = datasource.add("organizations", {"name": "KachinaHealth"})

    profiles = {}
    for email, name, role in DEMO_USERS:
        account = identity.register(email, DEMO_PASSWORD, full_name=name)
        profiles[role] = datasource.add(
            "profiles",
            {"id": account.id, "organization_id": org["id"], "role": role, "display_name": name},
        )
    admin_id = profiles["admin"]["id"]

    trial = datasource.add(
        "clinical_trials",
        {
            "organization_id": org["id"],
            "name": "Neuroprotection Trial",
            "description": "Phase 2 trial of neuroprotective strategies during cardiac surgery.",
            "created_by": admin_id,
        },
    )
    for role in ("doctor", "user"):
        datasource.add(
            "user_clinical_assignments",
            {"user_id": profiles[role]["id"], "clinical_trial_id": trial["id"], "organization_id": org["id"]},
        )

    scoped = {"organization_id": org["id"], "clinical_trial_id": trial["id"], "created_by": admin_id}
    datasource.add(
        "enrollments",
        {**scoped, "participant_name": "Participant 001", "enrollment_date": date(2025, 1, 15)},
    )
    datasource.add(
        "news_updates",
        {**scoped, "title": "Enrollment open", "body": "All sites are now enrolling participants."},
    )
    datasource.add(
        "training_materials",
        {**scoped, "title": "Site onboarding", "description": "Coordinator onboarding deck"},
    )
    datasource.add("study_protocols", {**scoped, "title": "Study protocol", "version": "1.0"})

    for name, location, investigator, consented, randomized, rate in HOSPITALS:
        datasource.add(
            "hospitals",
            {
                "hospital_name": name,
                "location": location,
                "principal_investigator": investigator,
                "consented_patients": consented,
                "randomized_patients": randomized,
                "consented_rate": rate,
            },
        )

    for key, value, kind, description in SETTINGS:
        datasource.add(
            "app_settings",
            {"setting_key": key, "setting_value": value, "setting_type": kind, "description": description},
        )

    datasource.add(
        "news",
        {
            "news_title": "Welcome to the KachinaHealth portal",
            "news_content": "Trial news and site updates are published here.",
            "created_by": admin_id,
            "created_by_name": "Demo Admin",
        },
    )

    now = datetime.now(timezone.utc)
    for (email, name, role), site, opens, views in zip(
        DEMO_USERS,
        ("City General Hospital", "Metro Medical Center", "Regional Health System"),
        (45, 32, 28),
        ({"0": 15, "1": 8, "2": 12}, {"0": 10, "1": 12, "2": 8}, {"0": 8, "2": 15, "3": 5}),
    ):
        datasource.add(
            "user_analytics",
            {
                "user_id": profiles[role]["id"],
                "user_name": name,
                "user_email": email,
                "site": site,
                "total_app_opens": opens,
                "last_app_open": now,
                "tab_views": views,
                "most_viewed_tab": max(views, key=views.get),
            },
        )

    log.info("demo.seeded", organization_id=str(org["id"]), users=len(DEMO_USERS))
