import random
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.core.files.base import ContentFile
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from applications.models import Application
from applications.utils import notify_new_application
from companies.models import Company, CompanyFollow, TeamMember
from jobs.models import EmploymentType, Job, SavedJob
from notifications.utils import create_in_app_notification
from support.models import ContactMessage

User = get_user_model()

SKILL_POOL = [
    "python",
    "django",
    "postgresql",
    "react",
    "javascript",
    "docker",
    "aws",
    "linux",
    "sql",
    "figma",
    "ui/ux",
    "java",
    "spring",
    "typescript",
    "node.js",
    "git",
    "rest",
    "ci/cd",
]

COMPANY_TEMPLATES = [
    ("NorthBridge Labs", "Software", "London, UK"),
    ("Harbor Metrics", "Analytics", "Manchester, UK"),
    ("BluePeak Systems", "Software", "Berlin, Germany"),
    ("CedarStone Digital", "Marketing", "London, UK"),
    ("OrbitGrid Tech", "Energy", "Leeds, UK"),
    ("Crownline Health", "Healthcare", "Bristol, UK"),
    ("Skyforge Data", "Analytics", "Remote"),
    ("Granite Works", "Construction", "Birmingham, UK"),
]

JOB_TEMPLATES = [
    ("Backend Developer", "Build and maintain APIs, background jobs, and PostgreSQL schemas for our hiring products."),
    ("Frontend Engineer", "Develop responsive interfaces with modern JavaScript and integrate them with our REST APIs."),
    ("Full Stack Developer", "Own features end to end across Django, REST APIs and the frontend modules that use them."),
    ("Data Analyst", "Transform product and hiring data into dashboards and insights the whole company can act on."),
    ("DevOps Engineer", "Automate CI/CD pipelines, deployments and runtime monitoring across several environments."),
    ("QA Engineer", "Write test cases, automate regression suites and keep every release of the platform healthy."),
    ("Product Designer", "Prototype user journeys and maintain design system components together with engineers."),
    ("Technical Recruiter", "Source candidates and coordinate interview pipelines with hiring managers across teams."),
]


class Command(BaseCommand):
    help = "Seed demo data: employers with companies and jobs, job seekers with applications."

    def add_arguments(self, parser):
        parser.add_argument("--prefix", type=str, default="demo")
        parser.add_argument("--companies", type=int, default=6)
        parser.add_argument("--seekers", type=int, default=12)
        parser.add_argument("--jobs-per-company", type=int, default=5)
        parser.add_argument("--applications-per-seeker", type=int, default=3)
        parser.add_argument("--password", type=str, default="DemoPass123!")
        parser.add_argument("--seed", type=int, default=42)
        parser.add_argument("--wipe", action="store_true", help="Delete existing users whose email starts with prefix first.")

    def _skills(self, rnd, minimum=3, maximum=5):
        return ", ".join(sorted(rnd.sample(SKILL_POOL, rnd.randint(minimum, maximum))))

    def _make_user(self, email, name, role, password, **extra):
        user, _ = User.objects.get_or_create(email=email, defaults={"username": email, "name": name, "role": role})
        # Keep demo credentials predictable.
        user.name = name
        user.role = role
        user.is_active = True
        for field, value in extra.items():
            setattr(user, field, value)
        user.set_password(password)
        user.save()
        return user

    @transaction.atomic
    def handle(self, *args, **opts):
        rnd = random.Random(opts["seed"])
        prefix = (opts["prefix"] or "demo").strip().lower()
        companies_n = max(1, int(opts["companies"]))
        seekers_n = max(1, int(opts["seekers"]))
        jobs_per_company = max(1, int(opts["jobs_per_company"]))
        apps_per_seeker = max(0, int(opts["applications_per_seeker"]))
        password = opts["password"]

        if opts["wipe"]:
            owned = Company.objects.filter(owner__email__startswith=f"{prefix}_")
            owned.delete()
            User.objects.filter(email__startswith=f"{prefix}_").delete()

        employer_creds = []
        seeker_creds = []
        created_jobs = []

        for i in range(1, companies_n + 1):
            email = f"{prefix}_employer_{i}@example.com"
            owner = self._make_user(email, f"Demo Employer {i}", User.Role.EMPLOYER, password)
            recruiter = self._make_user(
                f"{prefix}_recruiter_{i}@example.com", f"Demo Recruiter {i}", User.Role.EMPLOYER, password
            )

            base_name, industry, location = COMPANY_TEMPLATES[(i - 1) % len(COMPANY_TEMPLATES)]
            company, _ = Company.objects.get_or_create(
                name=f"{base_name} {i}",
                defaults={
                    "email": f"{prefix}_company_{i}@example.com",
                    "description": f"{base_name} is hiring across engineering, product and data teams in {location}.",
                    "website": "https://example.com",
                    "location": location,
                    "industry": industry,
                    "size": rnd.choice(["11-50", "51-200", "201-500"]),
                    "founded_year": rnd.randint(1990, 2020),
                    "owner": owner,
                },
            )
            TeamMember.objects.get_or_create(company=company, user=owner, defaults={"role": TeamMember.Role.ADMIN})
            TeamMember.objects.get_or_create(
                company=company, user=recruiter, defaults={"role": TeamMember.Role.RECRUITER}
            )

            for j in range(1, jobs_per_company + 1):
                title_base, description = JOB_TEMPLATES[(j + i - 2) % len(JOB_TEMPLATES)]
                salary_min = rnd.randint(35_000, 95_000)
                job, _ = Job.objects.get_or_create(
                    company=company,
                    title=f"{title_base} {i}.{j}",
                    defaults={
                        "posted_by": rnd.choice([owner, recruiter]),
                        "description": description,
                        "location": location if rnd.random() < 0.7 else "Remote",
                        "employment_type": rnd.choice(EmploymentType.values),
                        "salary_min": salary_min,
                        "salary_max": salary_min + rnd.randint(8_000, 35_000),
                        "skills": self._skills(rnd),
                        "requirements": "Relevant experience\nGood communication",
                        "benefits": "Health insurance\nFlexible hours\nLearning budget",
                        "experience_min_years": rnd.randint(0, 6),
                        "is_urgent": rnd.random() < 0.2,
                        "is_featured": rnd.random() < 0.15,
                        "created_at": timezone.now() - timedelta(days=rnd.randint(0, 25)),
                    },
                )
                created_jobs.append(job)

            employer_creds.append((email, password))

        seekers = []
        for i in range(1, seekers_n + 1):
            email = f"{prefix}_seeker_{i}@example.com"
            seeker = self._make_user(
                email,
                f"Demo Seeker {i}",
                User.Role.JOB_SEEKER,
                password,
                skills=self._skills(rnd),
                location=rnd.choice(["London", "Manchester", "Berlin", "Remote"]),
                total_experience=rnd.randint(0, 10),
                phone=f"+44-77-9000-{2000 + i}",
            )
            seekers.append(seeker)
            seeker_creds.append((email, password))

            for job in rnd.sample(created_jobs, k=min(2, len(created_jobs))):
                SavedJob.objects.get_or_create(user=seeker, job=job)
            company = rnd.choice(created_jobs).company
            CompanyFollow.objects.get_or_create(company=company, user=seeker)

        for seeker in seekers:
            for job in rnd.sample(created_jobs, k=min(apps_per_seeker, len(created_jobs))):
                # Reruns must consume the same random stream as the first run.
                status = rnd.choices(["pending", "reviewed", "interview", "rejected"], weights=[50, 20, 20, 10], k=1)[0]
                interview_in_days = rnd.randint(1, 7)
                interview_type = rnd.choice(Application.InterviewType.values)
                if Application.objects.filter(job=job, applicant=seeker).exists():
                    continue
                application = Application(
                    job=job,
                    company=job.company,
                    applicant=seeker,
                    cover_letter="I am interested in this role and believe my background is a strong fit.",
                )
                application.snapshot_applicant()
                application.calculate_match_score(job)
                application.resume.save(
                    f"{seeker.pk}_resume.txt",
                    ContentFile(f"Resume for {seeker.name}\nSkills: {seeker.skills}\n"),
                    save=False,
                )
                application.save()
                application.log("applied", seeker, "Application submitted (seed)")
                notify_new_application(application)

                if status != Application.Status.PENDING:
                    if status == Application.Status.INTERVIEW:
                        application.interview_scheduled_at = timezone.now() + timedelta(days=interview_in_days)
                        application.interview_type = interview_type
                        application.save(update_fields=["interview_scheduled_at", "interview_type"])
                    application.update_status(status, job.company.owner, f"Moved to {status} (seed)")

        for i, seeker in enumerate(seekers[:3], start=1):
            ContactMessage.objects.get_or_create(
                email=seeker.email,
                subject=f"Question about my profile #{i}",
                defaults={
                    "name": seeker.name,
                    "user": seeker,
                    "message": "How can I make my profile more visible to employers?",
                    "category": rnd.choice(ContactMessage.Category.values),
                    "page_url": "Direct",
                },
            )

        for email, _pwd in employer_creds + seeker_creds:
            user = User.objects.filter(email=email).first()
            if user:
                create_in_app_notification(
                    user,
                    title="Demo account ready",
                    message="Your seeded account includes companies, jobs and applications.",
                    url="/dashboard",
                )

        self.stdout.write(self.style.SUCCESS("Seeded demo data successfully."))
        self.stdout.write(f"Created/updated companies: {companies_n}")
        self.stdout.write(f"Created/updated job seekers: {seekers_n}")
        self.stdout.write(f"Created/updated jobs target: {companies_n * jobs_per_company}")
        self.stdout.write("")
        self.stdout.write("Sample credentials:")
        for email, pwd in employer_creds[:3]:
            self.stdout.write(f"  {email} / {pwd}")
        for email, pwd in seeker_creds[:3]:
            self.stdout.write(f"  {email} / {pwd}")
