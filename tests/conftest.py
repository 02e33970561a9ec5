"""Shared fixtures for redraft tests."""

import pytest

from redraft.contexts.templating.resume_data_structure import (
    BulletPoint,
    Education,
    Experience,
    PersonalInfo,
    Project,
    ResumeDocument,
    Skills,
)


@pytest.fixture
def sample_document() -> ResumeDocument:
    """Resume with every section populated."""
    return ResumeDocument(
        personal_info=PersonalInfo(
            name="Philip J. Fry",
            phone="555-0100",
            email="fry@planetexpress.com",
            linkedin="https://linkedin.com/in/pjfry",
            portfolio="https://fry.dev",
        ),
        education=[
            Education(
                school="Mars University",
                date="2998 -- 3000",
                degree="B.S. Delivery Logistics",
                gpa="GPA: 3.1",
            )
        ],
        skills=Skills(languages="Python, C#", frameworks="Django", tools="Docker & Git"),
        experience=[
            Experience(
                title="Delivery Boy",
                company="Planet Express",
                date="3000 -- Present",
                location="New New York",
                summary="Interplanetary deliveries",
                bullet_points=[
                    BulletPoint(original="Delivered packages", improved="Delivered 500+ packages", accepted=True),
                    BulletPoint(original="Drove the ship", improved="Piloted the ship", accepted=False),
                ],
            ),
            Experience(
                title="Delivery Boy",
                company="Panucci's Pizza",
                date="1999",
                location="New York",
                summary="Pizza delivery",
                bullet_points=[BulletPoint(original="Delivered pizza to I.C. Wiener")],
            ),
        ],
        projects=[
            Project(
                title="Slurm Tracker",
                date="3001",
                summary="Inventory tool",
                location="Wormulon",
                bullet_points=[BulletPoint(original="Tracked 100% of Slurm shipments")],
            ),
            Project(title="Holophoner App", date="3002"),
        ],
    )


@pytest.fixture
def sample_resume_data() -> dict:
    """camelCase resume data as the analysis service returns it."""
    return {
        "personalInfo": {
            "name": "Turanga Leela",
            "phone": "555-0199",
            "email": "leela@planetexpress.com",
            "linkedin": "",
            "portfolio": None,
        },
        "education": [{"school": "Orphanarium", "date": "2990", "degree": "Diploma", "gpa": 4.0}],
        "skills": {"languages": "Python", "frameworks": "", "tools": "Kubernetes"},
        "experience": [
            {
                "title": "Captain",
                "company": "Planet Express",
                "date": "3000",
                "location": "New New York",
                "summary": "Ship command",
                "bulletPoints": [
                    {"original": "Flew ship", "improved": "Captained 200 missions", "accepted": False},
                    "Kept crew alive",
                ],
            }
        ],
        "projects": [],
    }
