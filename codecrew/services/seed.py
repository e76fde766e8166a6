"""Demo data for local development (``flask seed``)."""

from __future__ import annotations

from datetime import timedelta
import logging
from typing import Any, Dict, List

from sqlalchemy import func, select

from ..extensions import db
from ..models import Blog, Hackathon, Invitation, Team, TeamMember, User
from ..utils.dates import utcnow
from .users import bootstrap_admin

logger = logging.getLogger(__name__)

SEED_PASSWORD = 'password123'

SEED_USERS: List[Dict[str, Any]] = [
    {
        'name': 'Alex Johnson',
        'email': 'alex.johnson@example.com',
        'bio': 'Full-stack developer with 5+ years experience in web development. Passionate about AI and machine learning.',
        'skills': ['JavaScript', 'React', 'Node.js', 'Python', 'MongoDB', 'AI/ML'],
        'experience': 'advanced',
        'github': 'https://github.com/alexjohnson',
        'linkedin': 'https://linkedin.com/in/alexjohnson',
        'portfolio': 'https://alexjohnson.dev',
        'personality_type': 'leader',
        'work_style': 'fullstack',
        'availability': 'full-time',
        'location': 'San Francisco, CA',
    },
    {
        'name': 'Sarah Chen',
        'email': 'sarah.chen@example.com',
        'bio': 'Frontend developer and UI/UX designer. Love creating beautiful and intuitive user experiences.',
        'skills': ['React', 'Vue.js', 'CSS', 'Figma', 'TypeScript', 'Design Systems'],
        'experience': 'intermediate',
        'github': 'https://github.com/sarahchen',
        'personality_type': 'innovator',
        'work_style': 'frontend',
        'availability': 'part-time',
        'location': 'New York, NY',
    },
    {
        'name': 'Mike Rodriguez',
        'email': 'mike.rodriguez@example.com',
        'bio': 'Backend engineer specializing in scalable systems and cloud architecture.',
        'skills': ['Java', 'Spring Boot', 'AWS', 'Docker', 'Kubernetes', 'PostgreSQL'],
        'experience': 'advanced',
        'personality_type': 'executor',
        'work_style': 'backend',
        'availability': 'weekends',
        'location': 'Austin, TX',
    },
    {
        'name': 'Emma Wilson',
        'email': 'emma.wilson@example.com',
        'bio': 'Data scientist and machine learning enthusiast. Currently pursuing PhD in Computer Science.',
        'skills': ['Python', 'TensorFlow', 'PyTorch', 'R', 'SQL', 'Data Visualization'],
        'experience': 'intermediate',
        'personality_type': 'analyst',
        'work_style': 'data',
        'availability': 'part-time',
        'location': 'Boston, MA',
    },
    {
        'name': 'David Kim',
        'email': 'david.kim@example.com',
        'bio': 'Mobile app developer with expertise in both iOS and Android platforms.',
        'skills': ['Swift', 'Kotlin', 'React Native', 'Flutter', 'Firebase', 'Mobile UI/UX'],
        'experience': 'intermediate',
        'personality_type': 'collaborator',
        'work_style': 'mobile',
        'availability': 'full-time',
        'location': 'Seattle, WA',
    },
]

# start offsets in days relative to the seeding time
SEED_HACKATHONS: List[Dict[str, Any]] = [
    {
        'title': 'AI Innovation Challenge',
        'description': 'Build innovative AI solutions that solve real-world problems. Focus on machine learning, natural language processing, and computer vision applications.',
        'organizer': 'TechCorp Inc.',
        'start_in': 30,
        'length': 2,
        'location': 'hybrid',
        'venue': 'TechCorp Campus, San Francisco',
        'max_participants': 500,
        'themes': ['Artificial Intelligence', 'Machine Learning', 'Healthcare', 'Education'],
        'prizes': [
            {'position': '1st Place', 'amount': '$10,000', 'description': 'Grand Prize Winner'},
            {'position': '2nd Place', 'amount': '$5,000', 'description': 'Runner Up'},
        ],
        'rules': 'Teams of 2-5 members. Original code only. 48-hour development window.',
        'requirements': ['Laptop', 'GitHub Account', 'Presentation Skills'],
        'tags': ['AI', 'ML', 'Innovation'],
        'difficulty': 'intermediate',
        'website': 'https://techcorp.com/hackathon',
        'contact_email': 'hackathon@techcorp.com',
    },
    {
        'title': 'Green Tech Hackathon',
        'description': 'Create sustainable technology solutions for environmental challenges. Focus on clean energy, waste reduction, and climate change mitigation.',
        'organizer': 'EcoTech Foundation',
        'start_in': 60,
        'length': 2,
        'location': 'online',
        'max_participants': 300,
        'themes': ['Sustainability', 'Clean Energy', 'Climate Change'],
        'tags': ['GreenTech', 'Sustainability'],
        'difficulty': 'all-levels',
    },
    {
        'title': 'FinTech Sprint',
        'description': 'Reimagine payments, personal finance and banking infrastructure in one intense weekend.',
        'organizer': 'OpenBank Labs',
        'start_in': -1,
        'length': 3,
        'location': 'in-person',
        'venue': 'OpenBank HQ, London',
        'themes': ['Payments', 'Personal Finance'],
        'tags': ['FinTech'],
        'difficulty': 'advanced',
    },
]

SEED_TEAMS: List[Dict[str, Any]] = [
    {
        'name': 'AI Pioneers',
        'description': 'Building an AI-powered study companion that adapts to each learner.',
        'max_members': 4,
        'required_skills': ['Python', 'Machine Learning', 'React'],
        'project_idea': 'Personalised tutoring with retrieval augmented generation.',
        'tags': ['AI', 'Education'],
    },
    {
        'name': 'Eco Warriors',
        'description': 'Tracking household energy use and nudging people towards greener habits.',
        'max_members': 5,
        'required_skills': ['IoT', 'Data Visualization', 'Mobile'],
        'tags': ['Sustainability'],
    },
    {
        'name': 'Ledger Legends',
        'description': 'Open source budgeting tools for freelancers.',
        'max_members': 3,
        'required_skills': ['Java', 'PostgreSQL'],
        'tags': ['FinTech'],
    },
]

_LOREM = (
    'Hackathons reward preparation as much as raw talent. Agree on roles early, keep the scope small, '
    'ship a working demo before polishing, and rehearse the pitch at least twice before judging starts. '
)

SEED_BLOGS: List[Dict[str, Any]] = [
    {
        'title': 'Ten Tips for Your First Hackathon',
        'content': _LOREM * 4,
        'category': 'tips',
        'tags': ['beginners', 'advice'],
        'status': 'published',
    },
    {
        'title': 'How We Won the AI Innovation Challenge',
        'content': _LOREM * 6,
        'category': 'success-stories',
        'tags': ['ai', 'winning'],
        'status': 'published',
    },
    {
        'title': 'Building a Pitch Deck in Two Hours',
        'content': _LOREM * 3,
        'category': 'tutorials',
        'tags': ['pitching'],
        'status': 'pending',
    },
]


def seed_database() -> Dict[str, int]:
    """Insert demo data unless the database already holds users."""

    if db.session.scalar(select(func.count()).select_from(User)):
        logger.info('seed.skipped.not_empty')
        return {}

    now = utcnow()
    users = []
    for index, data in enumerate(SEED_USERS):
        user = User(**data)
        user.set_password(SEED_PASSWORD)
        user.created_at = now - timedelta(minutes=len(SEED_USERS) - index)
        db.session.add(user)
        users.append(user)
    db.session.flush()

    hackathons = []
    for data in SEED_HACKATHONS:
        data = dict(data)
        start = now + timedelta(days=data.pop('start_in'))
        end = start + timedelta(days=data.pop('length'))
        hackathon = Hackathon(
            start_date=start,
            end_date=end,
            registration_deadline=start - timedelta(days=5),
            created_by_id=users[0].id,
            **data,
        )
        hackathon.check_schedule()
        hackathon.sync_status(now)
        db.session.add(hackathon)
        hackathons.append(hackathon)
    db.session.flush()

    teams = []
    for index, data in enumerate(SEED_TEAMS):
        leader = users[(index + 1) % len(users)]
        team = Team(
            leader_id=leader.id,
            hackathon_id=hackathons[index % len(hackathons)].id,
            member_count=1,
            **data,
        )
        team.members.append(TeamMember(user_id=leader.id, role='member'))
        team.derive_status()
        db.session.add(team)
        teams.append(team)
    db.session.flush()

    blogs = []
    for index, data in enumerate(SEED_BLOGS):
        blog = Blog(author_id=users[index % len(users)].id, related_hackathon_id=hackathons[0].id, **data)
        blog.prepare_for_save()
        db.session.add(blog)
        blogs.append(blog)

    expires = now + timedelta(days=7)
    invitations = [
        Invitation(
            type='team-invite',
            from_user_id=teams[0].leader_id,
            to_user_id=users[3].id,
            team_id=teams[0].id,
            message=f'Join "{teams[0].name}"! Your data skills would be a great fit.',
            expires_at=expires,
        ),
        Invitation(
            type='team-request',
            from_user_id=users[4].id,
            to_user_id=teams[1].leader_id,
            team_id=teams[1].id,
            message=f'{users[4].name} wants to join your team "{teams[1].name}"',
            expires_at=expires,
        ),
    ]
    db.session.add_all(invitations)
    db.session.commit()

    bootstrap_admin()

    counts = {
        'users': len(users),
        'hackathons': len(hackathons),
        'teams': len(teams),
        'blogs': len(blogs),
        'invitations': len(invitations),
    }
    logger.info('seed.completed', extra=counts)
    return counts


def clear_database() -> None:
    """Drop and recreate every table."""
    db.drop_all()
    db.create_all()
    logger.info('seed.database_cleared')
