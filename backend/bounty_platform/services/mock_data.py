"""Sample records served when Airtable is unavailable, and for the community widgets."""
from __future__ import annotations
from datetime import timedelta
from bounty_platform.schemas.bounty import Bounty, PlatformStats

MOCK_BOUNTIES: list[Bounty] = [
    Bounty(
        id="1",
        title="Create a Web3 Landing Page",
        description=(
            "Design and develop a modern landing page for a Web3 project. The page should be "
            "responsive, include animations, and have a clean, professional look."
        ),
        requirements=(
            "- Design must be responsive and mobile-friendly\n"
            "- Include hero section, features, and call-to-action\n"
            "- Provide both light and dark mode versions\n"
            "- Deliverables: Figma file with all design assets"
        ),
        reward=500,
        deadline="2025-05-22",
        category="Design",
        status="open",
    ),
    Bounty(
        id="2",
        title="Develop Smart Contract for NFT Marketplace",
        description=(
            "Create a secure and efficient smart contract for an NFT marketplace. The contract "
            "should handle minting, buying, selling, and royalties."
        ),
        requirements=(
            "- Implement listing, buying, and selling functions\n"
            "- Include royalty support for creators\n"
            "- Write comprehensive tests\n"
            "- Deliverables: Code repository with documentation"
        ),
        reward=1200,
        deadline="2025-05-29",
        category="Engineering",
        status="open",
    ),
    Bounty(
        id="3",
        title="Write Technical Documentation for DeFi Protocol",
        description=(
            "Create comprehensive technical documentation for a new DeFi protocol. The "
            "documentation should be clear, accurate, and accessible to developers of all skill levels."
        ),
        requirements=(
            "- Cover protocol architecture and components\n"
            "- Include API documentation and examples\n"
            "- Provide implementation guides\n"
            "- Deliverables: Markdown files with diagrams"
        ),
        reward=800,
        deadline="2025-05-18",
        category="Content creation",
        status="open",
    ),
    Bounty(
        id="4",
        title="Create UI/UX Design for Crypto Wallet",
        description=(
            "Design a user-friendly interface for a cryptocurrency wallet application. The design "
            "should be intuitive, visually appealing, and follow best practices."
        ),
        requirements=(
            "- Design all key screens (dashboard, send/receive, settings)\n"
            "- Create a consistent design system\n"
            "- Include both light and dark themes\n"
            "- Deliverables: Figma file with all screens and components"
        ),
        reward=700,
        deadline="2025-05-15",
        category="Design, Product",
        status="in-progress",
    ),
    Bounty(
        id="5",
        title="Create Educational Content on Blockchain",
        description=(
            "Develop a series of educational articles or videos explaining blockchain technology "
            "to beginners. Content should be clear, engaging, and accurate."
        ),
        requirements=(
            "- Cover key blockchain concepts\n"
            "- Include examples and illustrations\n"
            "- Make content accessible to non-technical audience\n"
            "- Deliverables: 5-7 articles or 3-5 videos"
        ),
        reward=600,
        deadline="2025-05-23",
        category="Content creation, Media",
        status="closed",
    ),
]

# Categories always offered, whether or not a bounty currently uses them
DEFAULT_CATEGORIES = ["Content creation", "Design", "Engineering", "Journalism", "Media", "Product"]

# (id, name, age, bounty title, category, reward)
MOCK_WINNERS = [
    ("1", "Alex Johnson", timedelta(days=2), "Create a Web3 Landing Page", "Design", 500),
    ("2", "Morgan Smith", timedelta(days=3), "Develop Smart Contract for NFT Marketplace", "Engineering", 1200),
    ("3", "Jordan Lee", timedelta(days=5), "Write Technical Documentation for DeFi Protocol", "Content creation", 800),
    ("4", "Taylor Kim", timedelta(days=45), "Create UI/UX Design for Crypto Wallet", "Design", 700),
]

# (id, type, user name, bounty title, amount, age)
MOCK_ACTIVITIES = [
    ("1", "new_bounty", None, "Build a DeFi Dashboard", 1800, timedelta(hours=1)),
    ("2", "payment", "Alex Johnson", "Create a Web3 Landing Page", 500, timedelta(days=2)),
    ("3", "application", "Jamie Wilson", "Develop Token Staking Feature", None, timedelta(hours=3)),
    ("4", "submission", "Casey Parker", "Write Technical Documentation for DeFi Protocol", None, timedelta(days=1)),
    ("5", "new_bounty", None, "Create a Tokenomics Model", 900, timedelta(days=2)),
    ("6", "application", "Riley Thompson", "Create UI/UX Design for Crypto Wallet", None, timedelta(hours=4)),
    ("7", "submission", "Morgan Smith", "Develop Smart Contract for NFT Marketplace", None, timedelta(days=3)),
    ("8", "payment", "Jordan Lee", "Write Technical Documentation for DeFi Protocol", 800, timedelta(days=5)),
]

MOCK_STATS = PlatformStats(
    total_earned="1.3M",
    available_opportunities=349,
    total_available="424.1K",
    active_users="12.5K",
    completion_rate=87,
)
