"""
Demo Data Loader - Creates a sample classroom through the API.

Creates a classroom, adds students, gives them names and scores, archives
one round of scores and prints the resulting access codes so the student
view can be tried right away.

Usage:
    python load_data.py                              # Uses default URL
    python load_data.py http://localhost:8000         # Custom API URL
    python load_data.py http://backend:8000           # Inside Docker network
"""

import os
import random
import sys

from classboard.client.api_client import ApiError, ClassroomApiClient

DEMO_CLASS = {
    "password": "demo1234",
    "name": "Demo Class",
    "secret_question": "What is the name of the school?",
    "secret_answer": "Lincoln",
}
DEMO_STUDENTS = ["Alice", "Bruno", "Chloé", "Dmitri", "Esther", "Farid"]


def main():
    api_url = sys.argv[1] if len(sys.argv) > 1 else os.getenv("API_URL", "http://localhost:8000")
    print(f"Seeding demo classroom at: {api_url}")
    print()

    with ClassroomApiClient(api_url, timeout=30.0) as api:
        try:
            created = api.create_classroom(**DEMO_CLASS)
        except ApiError as e:
            print(f"HTTP Error {e.status_code}: {e.message}")
            sys.exit(1)

        classroom_id = created["classroom"]["id"]
        token = created["teacher_token"]

        students = []
        for name in DEMO_STUDENTS:
            student = api.add_student(classroom_id, token)["new_student"]
            api.set_student_name(classroom_id, student["access_code"], name)
            students.append((name, student))

        # One archived round, then fresh live scores
        for _, student in students:
            api.update_score(classroom_id, student["id"], random.randint(0, 20), token)
        api.reset_scores(classroom_id, token)
        for _, student in students:
            api.update_score(classroom_id, student["id"], random.randint(0, 20), token)

        api.update_announcement(classroom_id, "Welcome to the demo classroom!", token)
        stats = api.get_stats(classroom_id)

    print("=" * 60)
    print("DEMO CLASSROOM")
    print("=" * 60)
    print(f"  Classroom ID:   {classroom_id}")
    print(f"  Password:       {DEMO_CLASS['password']}")
    print(f"  Students:       {stats['student_count']}")
    print(f"  Class mean:     {stats['class_mean']:.2f}")
    print("=" * 60)
    print()
    for name, student in students:
        print(f"  {student['access_code']}  {name}")
    print()
    print("✅ Demo data loaded.")


if __name__ == "__main__":
    main()
