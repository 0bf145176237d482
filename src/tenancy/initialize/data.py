"""Default records written by the system seed sequence."""

from dataclasses import dataclass, field

# Roles
SUPER_ADMIN = "super-admin"
ADMIN = "admin"
USER = "user"

DEFAULT_ROLES: list[dict[str, str]] = [
    {"name": "Super Administrator", "slug": SUPER_ADMIN, "description": "Full access to every tenant"},
    {"name": "Administrator", "slug": ADMIN, "description": "Tenant administrator"},
    {"name": "User", "slug": USER, "description": "Regular user"},
]

# Permissions
ALL_PERMISSIONS = "all_permissions"
READ = "read"
WRITE = "write"

DEFAULT_PERMISSIONS: list[dict[str, str]] = [
    {"name": ALL_PERMISSIONS, "action": "*", "subject": "*", "description": "Any action on any resource"},
    {"name": READ, "action": "GET", "subject": "*", "description": "Read any resource"},
    {"name": WRITE, "action": "POST", "subject": "*", "description": "Create any resource"},
]

# Permission names granted to each role
ROLE_PERMISSIONS: dict[str, list[str]] = {
    SUPER_ADMIN: [ALL_PERMISSIONS],
    ADMIN: [READ, WRITE],
    USER: [READ],
}


@dataclass(frozen=True)
class DefaultUser:
    username: str
    email: str
    phone: str
    role: str
    is_admin: bool = False
    is_certified: bool = True


DEFAULT_USERS: list[DefaultUser] = [
    DefaultUser("super", "super@example.com", "13800138000", SUPER_ADMIN, is_admin=True),
    DefaultUser("admin", "admin@example.com", "13800138001", ADMIN, is_admin=True),
    DefaultUser("user", "user@example.com", "13800138002", USER),
]

# Recorded as creator of the organization groups
ORGANIZATION_OWNER = "admin"


@dataclass(frozen=True)
class DefaultMenu:
    name: str
    slug: str
    type: str
    path: str
    icon: str | None = None
    perms: str | None = None
    parent: str | None = None
    order: int = 0


DEFAULT_MENUS: list[DefaultMenu] = [
    DefaultMenu("Dashboard", "dashboard", "header", "/dash", "IconGauge", "GET:/dash", order=1),
    DefaultMenu("System", "system", "header", "/system", "IconSettings", "GET:/system", order=99),
    DefaultMenu("Tenants", "system-tenants", "sidebar", "/system/tenants", "IconBuilding",
                "GET:/system/tenants", parent="system", order=1),
    DefaultMenu("Users", "system-users", "sidebar", "/system/users", "IconUsers",
                "GET:/system/users", parent="system", order=2),
    DefaultMenu("Roles", "system-roles", "sidebar", "/system/roles", "IconShield",
                "GET:/system/roles", parent="system", order=3),
    DefaultMenu("Permissions", "system-permissions", "sidebar", "/system/permissions", "IconKey",
                "GET:/system/permissions", parent="system", order=4),
    DefaultMenu("Menus", "system-menus", "sidebar", "/system/menus", "IconMenu",
                "GET:/system/menus", parent="system", order=5),
    DefaultMenu("Organization", "system-organization", "sidebar", "/system/organization",
                "IconHierarchy", "GET:/system/organization", parent="system", order=6),
]


@dataclass(frozen=True)
class Unit:
    """One organization unit and the units below it."""

    name: str
    slug: str
    type: str
    children: list["Unit"] = field(default_factory=list)


def _team(name: str, slug: str) -> Unit:
    return Unit(name, slug, "team")


COMPANY_DEPARTMENTS: dict[str, list[Unit]] = {
    "tech-company": [
        Unit("Technology Department", "tech-department", "department", [
            _team("Development Team", "rd-team"),
            _team("Operations Team", "operations-team"),
            _team("QA Team", "qa-team"),
        ]),
        Unit("Product Department", "product-department", "department", [
            _team("Product Planning Team", "product-planning-team"),
            _team("UX Team", "ux-team"),
        ]),
    ],
    "media-company": [
        Unit("Content Production Department", "content-production-department", "department", [
            _team("Video Production Team", "video-production-team"),
            _team("Text Editing Team", "text-editing-team"),
        ]),
        Unit("Media Operations Department", "media-operations-department", "department", [
            _team("Social Media Team", "social-media-team"),
            _team("Data Analysis Team", "data-analysis-team"),
        ]),
    ],
}


def common_departments(company: str) -> list[Unit]:
    """Departments every company has, with slugs prefixed by the company slug."""
    return [
        Unit("Marketing Department", f"{company}-marketing-department", "department", [
            _team("Brand Team", f"{company}-brand-team"),
            _team("Market Research Team", f"{company}-marketing-research-team"),
        ]),
        Unit("HR Department", f"{company}-hr-department", "department", [
            _team("Recruitment Team", f"{company}-recruitment-team"),
            _team("Training & Development Team", f"{company}-train-development-team"),
        ]),
    ]


COMPANIES: list[tuple[str, str]] = [
    ("Technology Company", "tech-company"),
    ("Media Company", "media-company"),
]


def organization_tree() -> Unit:
    """The full sample hierarchy rooted at the enterprise group."""
    companies = [
        Unit(name, slug, "company", COMPANY_DEPARTMENTS.get(slug, []) + common_departments(slug))
        for name, slug in COMPANIES
    ]
    return Unit(
        "Enterprise Group",
        "enterprise-group",
        "group",
        [
            Unit("Executive Office", "executive-office", "department"),
            Unit("Group HR Department", "group-hr-department", "department"),
            Unit("Group Finance Department", "group-finance-department", "department"),
            *companies,
            Unit("Strategy Committee", "strategy-committee", "temporary"),
            Unit("Digital Transformation Team", "digital-transformation-team", "temporary"),
        ],
    )


ORGANIZATION_PERMISSIONS: list[dict[str, str]] = [
    {"name": "Manage Group", "action": "*", "subject": "group"},
    {"name": "Manage Department", "action": "*", "subject": "department"},
    {"name": "Manage Team", "action": "*", "subject": "team"},
    {"name": "View Group", "action": "GET", "subject": "group"},
    {"name": "View Department", "action": "GET", "subject": "department"},
    {"name": "View Team", "action": "GET", "subject": "team"},
]

# Organization permissions granted to the default roles; the role table
# keeps exactly the default roles
ORGANIZATION_ROLE_PERMISSIONS: dict[str, list[str]] = {
    SUPER_ADMIN: ["Manage Group", "Manage Department", "Manage Team"],
    ADMIN: ["Manage Department", "Manage Team", "View Group"],
    USER: ["View Team", "View Department", "View Group"],
}
