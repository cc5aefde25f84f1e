#!/usr/bin/env python3
# generate_postings.py

"""
Generate synthetic job postings for offline builds and tests.

Usage:
  python -m data_generation.generate_postings <out_dir> [count] [seed]

Writes five CSV files into <out_dir>, named like the hosted extracts so
either build can point at the directory instead of the bucket:

  job_postings_flat.csv                       → `python -m warehouse.etl flat <out_dir>/job_postings_flat.csv`
  company_dim.csv, skills_dim.csv,
  job_postings_fact.csv, skills_job_dim.csv   → `python -m warehouse.etl dw <out_dir>`

Distributions:
  - Yearly salaries follow a log-normal distribution (high variance); most
    postings report no salary at all.
  - Posting dates cluster in the second half of 2023 via a truncated Gaussian.
  - Titles, countries and skills are sampled with weights (some far more popular).
"""

import csv
import datetime
import os
import random
import sys

from faker import Faker
from tqdm import tqdm

from data_sources.model import (
    FLAT_COLUMNS,
    FLAT_POSTINGS_FILE,
    COMPANY_DIM_FILE,
    SKILLS_DIM_FILE,
    POSTINGS_FACT_FILE,
    SKILLS_JOB_FILE,
)
from warehouse.star_schema import FACT_COLUMNS

# ─────────── Catalogs ───────────────────────────────────────────────────────────
ROLES = [
    ("Data Analyst",              30),
    ("Data Engineer",             25),
    ("Data Scientist",            20),
    ("Senior Data Engineer",       8),
    ("Software Engineer",         10),
    ("Machine Learning Engineer",  7),
]

COUNTRIES = [
    ("United States",  40),
    ("India",          12),
    ("United Kingdom", 10),
    ("Germany",         9),
    ("France",          8),
    ("Canada",          8),
    ("Netherlands",     5),
    ("Sudan",           1),
]

SKILL_CATALOG = {
    "sql":        "programming",
    "python":     "programming",
    "r":          "programming",
    "scala":      "programming",
    "java":       "programming",
    "aws":        "cloud",
    "azure":      "cloud",
    "gcp":        "cloud",
    "snowflake":  "cloud",
    "databricks": "cloud",
    "spark":      "libraries",
    "airflow":    "libraries",
    "kafka":      "libraries",
    "pandas":     "libraries",
    "tableau":    "analyst_tools",
    "power bi":   "analyst_tools",
    "excel":      "analyst_tools",
    "postgresql": "databases",
    "mongodb":    "databases",
    "docker":     "other",
    "git":        "other",
}

# sql and python dominate real postings; everything else trails off
SKILL_WEIGHTS = {skill: (30 if skill in ("sql", "python") else 6) for skill in SKILL_CATALOG}

VIA = ["via LinkedIn", "via Indeed", "via Glassdoor", "via ZipRecruiter", "via company site"]
SCHEDULES = [("Full-time", 85), ("Contractor", 8), ("Part-time", 5), ("Internship", 2)]
SENIORITY = ["", "", "", "Senior ", "Lead ", "Junior "]

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
YEAR_END = datetime.datetime(2023, 12, 31, 23, 0, 0)


def _weighted(rng: random.Random, pairs):
    values = [v for v, _ in pairs]
    weights = [w for _, w in pairs]
    return rng.choices(values, weights=weights, k=1)[0]


def random_posted_date(rng: random.Random) -> datetime.datetime:
    """
    Truncated Gaussian centered 120 days before year end, sigma=90 days,
    clamped to the 2023 calendar year.
    """
    days_ago = int(abs(rng.gauss(120, 90)))
    days_ago = min(days_ago, 364)
    minutes = rng.randint(0, 23 * 60)
    return YEAR_END - datetime.timedelta(days=days_ago, minutes=minutes)


def random_salary(rng: random.Random, missing_share: float = 0.7):
    """Log-normal yearly salary, clamped to 30k–500k; None for `missing_share` of postings."""
    if rng.random() < missing_share:
        return None
    val = rng.lognormvariate(mu=11.7, sigma=0.35)
    return float(round(max(30_000, min(val, 500_000)), 1))


def random_skills(rng: random.Random) -> list[str]:
    k = rng.choice([0, 1, 2, 2, 3, 3, 4, 5, 6])
    picked = []
    skills = list(SKILL_WEIGHTS)
    weights = list(SKILL_WEIGHTS.values())
    while len(picked) < k:
        skill = rng.choices(skills, weights=weights, k=1)[0]
        if skill not in picked:
            picked.append(skill)
    return picked


def format_job_skills(skills: list[str]):
    """The raw Python-list string the flat extract carries, e.g. "['sql', 'python']"."""
    if not skills:
        return None
    return "[" + ", ".join(f"'{s}'" for s in skills) + "]"


def format_job_type_skills(skills: list[str]):
    if not skills:
        return None
    by_type = {}
    for s in skills:
        by_type.setdefault(SKILL_CATALOG[s], []).append(s)
    return "{" + ", ".join(
        f"'{t}': [" + ", ".join(f"'{s}'" for s in names) + "]" for t, names in by_type.items()
    ) + "}"


# ─────────── Postings ───────────────────────────────────────────────────────────

def generate_postings(count: int = 1_000, seed: int = 42) -> list[dict]:
    """
    Build `count` postings as dicts keyed by the flat column names, plus a
    `skills` list per posting. The same seed always yields the same postings.
    """
    rng = random.Random(seed)
    fake = Faker()
    fake.seed_instance(seed)

    companies = sorted({fake.company() for _ in range(max(5, count // 20))})
    locations = {country: [fake.city() for _ in range(3)] for country, _ in COUNTRIES}

    postings = []
    for _ in tqdm(range(count), desc="Postings", disable=count < 10_000):
        title_short = _weighted(rng, ROLES)
        country = _weighted(rng, COUNTRIES)
        remote = rng.random() < 0.1
        location = "Anywhere" if remote else f"{rng.choice(locations[country])}, {country}"
        prefix = "" if title_short.startswith("Senior") else rng.choice(SENIORITY)
        skills = random_skills(rng)
        salary = random_salary(rng)
        hourly = None
        rate = "year" if salary is not None else None
        if salary is None and rng.random() < 0.05:
            hourly = float(round(rng.uniform(25, 120), 1))
            rate = "hour"

        postings.append({
            "job_title_short":       title_short,
            "job_title":             f"{prefix}{title_short}",
            "job_location":          location,
            "job_via":               rng.choice(VIA),
            "job_schedule_type":     _weighted(rng, SCHEDULES),
            "job_work_from_home":    remote,
            "search_location":       country,
            "job_posted_date":       random_posted_date(rng),
            "job_no_degree_mention": rng.random() < 0.25,
            "job_health_insurance":  rng.random() < 0.4,
            "job_country":           country,
            "salary_rate":           rate,
            "salary_year_avg":       salary,
            "salary_hour_avg":       hourly,
            "company_name":          rng.choice(companies) if rng.random() > 0.03 else None,
            "job_skills":            format_job_skills(skills),
            "job_type_skills":       format_job_type_skills(skills),
            "skills":                skills,
        })
    return postings


# ─────────── CSV output ─────────────────────────────────────────────────────────

def _cell(value):
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime.datetime):
        return value.strftime(DATE_FORMAT)
    return value


def _write_csv(path: str, columns, rows) -> int:
    n = 0
    with open(path, "w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh)
        writer.writerow(columns)
        for row in rows:
            writer.writerow([_cell(row.get(c)) for c in columns])
            n += 1
    return n


def write_csvs(postings: list[dict], out_dir: str) -> dict:
    """
    Write the flat extract and the four star CSVs. Keys in the star files are
    consistent with each other (companies and skills ranked by name, jobs
    numbered in generation order). Returns {file name: rows written}.
    """
    os.makedirs(out_dir, exist_ok=True)

    company_ids = {
        name: i for i, name in enumerate(
            sorted({p["company_name"] for p in postings if p["company_name"]}), start=1
        )
    }
    skill_ids = {
        name: i for i, name in enumerate(
            sorted({s for p in postings for s in p["skills"]}), start=1
        )
    }

    companies = [
        {
            "company_id":  cid,
            "name":        name,
            "link":        None,
            "link_google": f"https://www.google.com/search?q={name.replace(' ', '+')}",
            "thumbnail":   None,
        }
        for name, cid in company_ids.items()
    ]
    skills = [
        {"skill_id": sid, "skills": name, "type": SKILL_CATALOG[name]}
        for name, sid in skill_ids.items()
    ]
    facts, bridge = [], []
    for job_id, p in enumerate(postings, start=1):
        facts.append({**p, "job_id": job_id, "company_id": company_ids.get(p["company_name"])})
        bridge.extend({"skill_id": skill_ids[s], "job_id": job_id} for s in p["skills"])

    return {
        FLAT_POSTINGS_FILE: _write_csv(os.path.join(out_dir, FLAT_POSTINGS_FILE), FLAT_COLUMNS, postings),
        COMPANY_DIM_FILE:   _write_csv(os.path.join(out_dir, COMPANY_DIM_FILE),
                                       ["company_id", "name", "link", "link_google", "thumbnail"], companies),
        SKILLS_DIM_FILE:    _write_csv(os.path.join(out_dir, SKILLS_DIM_FILE), ["skill_id", "skills", "type"], skills),
        POSTINGS_FACT_FILE: _write_csv(os.path.join(out_dir, POSTINGS_FACT_FILE), FACT_COLUMNS, facts),
        SKILLS_JOB_FILE:    _write_csv(os.path.join(out_dir, SKILLS_JOB_FILE), ["skill_id", "job_id"], bridge),
    }


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    out_dir = sys.argv[1]
    count = int(sys.argv[2]) if len(sys.argv) > 2 else 10_000
    seed = int(sys.argv[3]) if len(sys.argv) > 3 else 42

    written = write_csvs(generate_postings(count, seed), out_dir)
    for name, n in written.items():
        print(f"   • wrote {name} ({n} rows)")
    print(f"✅ Synthetic postings written to {out_dir}")
