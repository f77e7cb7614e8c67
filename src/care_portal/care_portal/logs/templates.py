"""Built-in case log templates offered to care staff."""

LOG_TEMPLATES = [
    {
        "id": "daily_notes",
        "name": "Daily Notes",
        "description": "General daily observations and notes",
        "fields": [
            {"name": "mood", "label": "Mood/Behavior", "type": "select", "options": ["Good", "Fair", "Concerning"]},
            {"name": "activities", "label": "Activities Participated", "type": "textarea"},
            {"name": "meals", "label": "Meal Participation", "type": "select", "options": ["Full", "Partial", "Minimal"]},
            {"name": "notes", "label": "Additional Notes", "type": "textarea"},
        ],
    },
    {
        "id": "incident_report",
        "name": "Incident Report",
        "description": "Report any incidents or concerns",
        "fields": [
            {
                "name": "incident_type",
                "label": "Incident Type",
                "type": "select",
                "options": ["Medical", "Behavioral", "Safety", "Other"],
            },
            {"name": "time", "label": "Time of Incident", "type": "time"},
            {"name": "description", "label": "Description", "type": "textarea"},
            {"name": "action_taken", "label": "Action Taken", "type": "textarea"},
            {"name": "follow_up", "label": "Follow-up Required", "type": "select", "options": ["Yes", "No"]},
        ],
    },
    {
        "id": "medication_log",
        "name": "Medication Log",
        "description": "Track medication administration",
        "fields": [
            {"name": "medication", "label": "Medication", "type": "text"},
            {"name": "dosage", "label": "Dosage", "type": "text"},
            {"name": "time_given", "label": "Time Given", "type": "time"},
            {"name": "administered_by", "label": "Administered By", "type": "text"},
            {"name": "notes", "label": "Notes", "type": "textarea"},
        ],
    },
    {
        "id": "care_plan_update",
        "name": "Care Plan Update",
        "description": "Updates to resident care plan",
        "fields": [
            {
                "name": "area",
                "label": "Care Area",
                "type": "select",
                "options": ["Physical", "Mental Health", "Social", "Medical", "Activities"],
            },
            {"name": "update", "label": "Update Description", "type": "textarea"},
            {"name": "goals", "label": "Updated Goals", "type": "textarea"},
            {"name": "next_review", "label": "Next Review Date", "type": "date"},
        ],
    },
]
