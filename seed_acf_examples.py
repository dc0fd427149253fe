import sys
import os

# Add current directory to path so we can import app modules
sys.path.append(os.getcwd())

from app.core.database import SessionLocal
from app.models import Brand, Category, School
from app.services.field_definition_service import FieldDefinitionService

EXAMPLE_GROUPS = [
    {
        "group": {
            "title": "User Profile",
            "key": "user_profile",
            "description": "Additional user profile information",
            "position": 0,
            "active": True,
        },
        "fields": [
            {
                "label": "Phone Number",
                "name": "phone_number",
                "key": "field_phone_number",
                "type": "text",
                "instructions": "Enter your contact phone number",
                "placeholder": "+1 (555) 000-0000",
            },
            {
                "label": "Department",
                "name": "department",
                "key": "field_department",
                "type": "select",
                "instructions": "Select your department",
                "required": True,
                "choices": {
                    "sales": "Sales Department",
                    "marketing": "Marketing Department",
                    "engineering": "Engineering Department",
                    "hr": "Human Resources",
                    "finance": "Finance",
                },
            },
            {
                "label": "Skills",
                "name": "skills",
                "key": "field_skills",
                "type": "checkbox",
                "choices": {"php": "PHP", "python": "Python", "sql": "SQL", "design": "Design"},
                "multiple": True,
            },
            {
                "label": "Newsletter",
                "name": "newsletter",
                "key": "field_newsletter",
                "type": "true_false",
                "default_value": [False],
            },
        ],
    },
    {
        "group": {
            "title": "Category Feedback",
            "key": "category_feedback",
            "description": "Public feedback form for catalog categories",
            "position": 1,
            "active": True,
        },
        "fields": [
            {"label": "Your Name", "name": "name", "key": "feedback_name", "type": "text", "required": True},
            {"label": "Email", "name": "email", "key": "feedback_email", "type": "email", "required": True},
            {
                "label": "Category",
                "name": "category",
                "key": "feedback_category",
                "type": "model",
                "model_type": "Category",
                "required": True,
            },
            {
                "label": "Rating",
                "name": "rating",
                "key": "feedback_rating",
                "type": "radio",
                "choices": {"1": "Poor", "2": "Fair", "3": "Good", "4": "Great"},
            },
            {"label": "Comments", "name": "comments", "key": "feedback_comments", "type": "textarea"},
        ],
    },
]


def seed_entities(db):
    if db.query(Category.id).first() is None:
        print("Inserting demo categories")
        db.add_all([
            Category(name="Electronics", slug="electronics", description="Phones, laptops and accessories"),
            Category(name="Books", slug="books", description="Printed and digital books"),
            Category(name="Garden", slug="garden", active=False),
        ])
    if db.query(Brand.id).first() is None:
        print("Inserting demo brands")
        db.add_all([Brand(name="Acme"), Brand(name="Globex", website="https://globex.example")])
    if db.query(School.id).first() is None:
        print("Inserting demo schools")
        db.add_all([School(name="Riverside High", code="RHS", city="Springfield")])
    db.commit()


def seed_field_groups(db):
    for example in EXAMPLE_GROUPS:
        key = example["group"]["key"]
        if FieldDefinitionService.group_exists(db, key):
            print(f"Field group {key} already exists")
            continue

        print(f"Inserting field group: {key}")
        group = FieldDefinitionService.create_group(db, example["group"])
        for field in example["fields"]:
            FieldDefinitionService.create_field(db, group.id, field)


def seed_acf_examples():
    db = SessionLocal()
    try:
        seed_entities(db)
        seed_field_groups(db)
        print("Custom field examples seeded successfully.")
    except Exception as e:
        print(f"Error seeding custom field examples: {e}")
        db.rollback()
        raise
    finally:
        db.close()

if __name__ == "__main__":
    seed_acf_examples()
