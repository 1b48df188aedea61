"""
Question catalog for MockPrep

Static reference data: the built-in interview questions and the role
taxonomy used to match them.
"""

from src.models.question import Question, QuestionDifficulty, QuestionType


# ============================================================================
# ROLE TAXONOMY
# ============================================================================

ROLE_TAGS: dict[str, list[str]] = {
    "frontend-developer": ["frontend", "javascript", "react", "css"],
    "backend-developer": ["backend", "nodejs", "database", "api"],
    "fullstack-developer": ["frontend", "backend", "javascript", "database"],
    "data-scientist": ["datascience", "machine-learning", "python", "statistics"],
    "devops-engineer": ["devops", "containers", "cloud", "automation"],
    "mobile-developer": ["mobile", "ios", "android", "react-native"],
    "product-manager": ["product-thinking", "strategy", "analytics"],
    "engineering-manager": ["leadership", "management", "technical-leadership"],
}

_T = QuestionType
_D = QuestionDifficulty


# ============================================================================
# TECHNICAL QUESTIONS
# ============================================================================

TECHNICAL_QUESTIONS: list[Question] = [
    Question(
        id="fe_001",
        text="Explain the difference between useState and useReducer hooks in React. When would you use each?",
        type=_T.TECHNICAL,
        difficulty=_D.MEDIUM,
        category="frontend",
        tags=["react", "hooks", "state-management", "frontend"],
        evaluation_criteria=[
            "Understanding of hook fundamentals",
            "Knowledge of state management patterns",
            "Ability to explain use cases",
            "Code examples or practical scenarios",
        ],
    ),
    Question(
        id="fe_002",
        text="What is the event loop in JavaScript? How does it handle asynchronous operations?",
        type=_T.TECHNICAL,
        difficulty=_D.HARD,
        category="frontend",
        tags=["javascript", "async", "event-loop", "performance"],
        evaluation_criteria=[
            "Understanding of call stack",
            "Knowledge of callback queue",
            "Explanation of microtasks versus macrotasks",
            "Real-world examples",
        ],
    ),
    Question(
        id="fe_003",
        text="Explain CSS Grid versus Flexbox. When would you use each layout system?",
        type=_T.TECHNICAL,
        difficulty=_D.MEDIUM,
        category="frontend",
        tags=["css", "layout", "frontend"],
        evaluation_criteria=[
            "Understanding of one and two dimensional layouts",
            "Knowledge of use cases",
            "Practical examples",
            "Browser support considerations",
        ],
    ),
    Question(
        id="fe_004",
        text="How would you diagnose and fix poor rendering performance in a large React application?",
        type=_T.TECHNICAL,
        difficulty=_D.HARD,
        category="frontend",
        tags=["react", "performance", "frontend"],
        evaluation_criteria=[
            "Profiling before optimizing",
            "Memoization and rendering boundaries",
            "Virtualization of long lists",
            "Measuring the improvement",
        ],
    ),
    Question(
        id="fe_005",
        text="What is the virtual DOM and why does React use it?",
        type=_T.TECHNICAL,
        difficulty=_D.EASY,
        category="frontend",
        tags=["react", "frontend"],
        evaluation_criteria=["Diffing and reconciliation", "Batching of updates"],
    ),
    Question(
        id="be_001",
        text="How does Node.js handle concurrent requests with its single-threaded architecture?",
        type=_T.TECHNICAL,
        difficulty=_D.MEDIUM,
        category="backend",
        tags=["nodejs", "concurrency", "event-loop", "backend"],
        evaluation_criteria=[
            "Understanding of event-driven architecture",
            "Knowledge of libuv and thread pool",
            "Explanation of non-blocking I/O",
            "Performance implications",
        ],
    ),
    Question(
        id="be_002",
        text="Design a rate limiter for a public API. Which algorithm would you choose and why?",
        type=_T.TECHNICAL,
        difficulty=_D.HARD,
        category="backend",
        tags=["api", "backend", "architecture"],
        evaluation_criteria=[
            "Token bucket or sliding window algorithms",
            "Distributed state storage",
            "Handling bursts and fairness",
            "Client feedback through headers",
        ],
    ),
    Question(
        id="be_003",
        text="Explain database indexing. How do indexes improve query performance and what do they cost?",
        type=_T.TECHNICAL,
        difficulty=_D.MEDIUM,
        category="backend",
        tags=["database", "performance", "backend"],
        evaluation_criteria=[
            "B-tree structure",
            "Read versus write trade-offs",
            "Composite index ordering",
            "Query plan analysis",
        ],
    ),
    Question(
        id="be_004",
        text="How would you design authentication and authorization for a REST API serving mobile and web clients?",
        type=_T.TECHNICAL,
        difficulty=_D.HARD,
        category="backend",
        tags=["api", "security", "backend"],
        evaluation_criteria=[
            "Token based authentication",
            "Refresh token rotation",
            "Role or scope based authorization",
            "Secure storage on clients",
        ],
    ),
    Question(
        id="be_005",
        text="What are database transactions and what do the ACID properties guarantee?",
        type=_T.TECHNICAL,
        difficulty=_D.MEDIUM,
        category="backend",
        tags=["database", "backend"],
        evaluation_criteria=[
            "Atomicity and consistency",
            "Isolation levels",
            "Durability guarantees",
        ],
    ),
    Question(
        id="be_006",
        text="When would you split a monolith into microservices, and what problems does that introduce?",
        type=_T.TECHNICAL,
        difficulty=_D.HARD,
        category="backend",
        tags=["architecture", "microservices", "backend"],
        evaluation_criteria=[
            "Service boundaries aligned with domains",
            "Network failure handling",
            "Data consistency across services",
            "Operational overhead",
        ],
    ),
    Question(
        id="ds_001",
        text="Explain the bias-variance tradeoff in machine learning.",
        type=_T.TECHNICAL,
        difficulty=_D.MEDIUM,
        category="datascience",
        tags=["machine-learning", "statistics", "datascience"],
        evaluation_criteria=[
            "Definition of bias and variance",
            "Relationship to overfitting and underfitting",
            "Techniques to balance the tradeoff",
        ],
    ),
    Question(
        id="ds_002",
        text="How would you handle a heavily imbalanced dataset when training a classifier?",
        type=_T.TECHNICAL,
        difficulty=_D.HARD,
        category="datascience",
        tags=["machine-learning", "python", "datascience"],
        evaluation_criteria=[
            "Resampling techniques",
            "Class weights",
            "Appropriate evaluation metrics",
            "Threshold tuning",
        ],
    ),
    Question(
        id="ds_003",
        text="How do you validate that a model will perform well in production and not just on your test set?",
        type=_T.TECHNICAL,
        difficulty=_D.HARD,
        category="datascience",
        tags=["machine-learning", "statistics", "datascience"],
        evaluation_criteria=[
            "Cross validation",
            "Data leakage prevention",
            "Monitoring for drift",
            "Offline and online evaluation",
        ],
    ),
    Question(
        id="devops_001",
        text="Explain the difference between containers and virtual machines.",
        type=_T.TECHNICAL,
        difficulty=_D.MEDIUM,
        category="devops",
        tags=["containers", "devops", "cloud"],
        evaluation_criteria=[
            "Kernel sharing",
            "Resource overhead",
            "Isolation guarantees",
            "Deployment use cases",
        ],
    ),
    Question(
        id="devops_002",
        text="Design a CI/CD pipeline for a service deployed to Kubernetes with zero downtime.",
        type=_T.TECHNICAL,
        difficulty=_D.HARD,
        category="devops",
        tags=["automation", "containers", "devops"],
        evaluation_criteria=[
            "Automated testing stages",
            "Rolling or blue-green deployment",
            "Health checks and rollback",
            "Secrets management",
        ],
    ),
    Question(
        id="devops_003",
        text="How would you design monitoring and alerting for a cloud service?",
        type=_T.TECHNICAL,
        difficulty=_D.MEDIUM,
        category="devops",
        tags=["cloud", "automation", "devops"],
        evaluation_criteria=[
            "Metrics logs and traces",
            "Service level objectives",
            "Alert fatigue reduction",
        ],
    ),
    Question(
        id="sd_001",
        text="Design a URL shortening service that handles millions of requests per day.",
        type=_T.TECHNICAL,
        difficulty=_D.HARD,
        category="system-design",
        tags=["architecture", "scalability", "database", "backend"],
        evaluation_criteria=[
            "Key generation strategy",
            "Storage and caching layers",
            "Scalability of reads",
            "Analytics and expiration",
        ],
    ),
    Question(
        id="sd_002",
        text="Design a real-time chat system supporting group conversations.",
        type=_T.TECHNICAL,
        difficulty=_D.HARD,
        category="system-design",
        tags=["architecture", "scalability", "backend"],
        evaluation_criteria=[
            "Persistent connections",
            "Message ordering and delivery",
            "Presence tracking",
            "Storage of message history",
        ],
    ),
    Question(
        id="sd_003",
        text="How would you design a caching strategy for a read-heavy API?",
        type=_T.TECHNICAL,
        difficulty=_D.MEDIUM,
        category="system-design",
        tags=["performance", "api", "backend"],
        evaluation_criteria=[
            "Cache placement",
            "Invalidation strategy",
            "Consistency trade-offs",
            "Stampede protection",
        ],
    ),
    Question(
        id="code_001",
        text="Given an algorithm that runs slowly on large inputs, how do you find and improve the bottleneck?",
        type=_T.TECHNICAL,
        difficulty=_D.MEDIUM,
        category="coding",
        tags=["algorithm", "performance", "python"],
        evaluation_criteria=[
            "Complexity analysis",
            "Profiling",
            "Choosing better data structures",
        ],
    ),
    Question(
        id="code_002",
        text="What is the difference between a stack and a queue, and where would you use each?",
        type=_T.TECHNICAL,
        difficulty=_D.EASY,
        category="coding",
        tags=["algorithm", "data-structures"],
        evaluation_criteria=["Ordering semantics", "Practical use cases"],
    ),
    Question(
        id="mob_001",
        text="How do you manage offline data synchronization in a mobile application?",
        type=_T.TECHNICAL,
        difficulty=_D.HARD,
        category="mobile",
        tags=["mobile", "android", "ios"],
        evaluation_criteria=[
            "Local persistence",
            "Conflict resolution",
            "Background sync scheduling",
        ],
    ),
    Question(
        id="pm_001",
        text="How would you measure the success of a newly launched product feature?",
        type=_T.TECHNICAL,
        difficulty=_D.MEDIUM,
        category="product",
        role="product-manager",
        tags=["product-thinking", "analytics"],
        evaluation_criteria=[
            "Defining success metrics",
            "Baseline and experiment design",
            "Leading and lagging indicators",
        ],
    ),
]


# ============================================================================
# BEHAVIORAL QUESTIONS
# ============================================================================

BEHAVIORAL_QUESTIONS: list[Question] = [
    Question(
        id="beh_001",
        text="Tell me about a time when you had to work with a difficult team member.",
        type=_T.BEHAVIORAL,
        difficulty=_D.MEDIUM,
        category="teamwork",
        tags=["teamwork", "conflict-resolution", "communication"],
        evaluation_criteria=[
            "Clear situation description",
            "Specific actions taken",
            "Positive outcome achieved",
            "Lessons learned",
        ],
    ),
    Question(
        id="beh_002",
        text="Describe a situation where you had to meet a tight deadline.",
        type=_T.BEHAVIORAL,
        difficulty=_D.MEDIUM,
        category="time-management",
        tags=["time-management", "pressure", "prioritization"],
        evaluation_criteria=[
            "Planning and prioritization",
            "Actions under pressure",
            "Delivered result",
        ],
    ),
    Question(
        id="beh_003",
        text="Tell me about a time you failed. What did you learn from it?",
        type=_T.BEHAVIORAL,
        difficulty=_D.HARD,
        category="growth",
        tags=["failure", "learning", "self-awareness"],
        evaluation_criteria=[
            "Ownership of the failure",
            "Reflection on causes",
            "Concrete changes made afterwards",
        ],
    ),
    Question(
        id="beh_004",
        text="Describe a time when you led a project from start to finish.",
        type=_T.BEHAVIORAL,
        difficulty=_D.HARD,
        category="leadership",
        tags=["leadership", "project-management", "management"],
        evaluation_criteria=[
            "Scope and goals",
            "Coordination of the team",
            "Handling of obstacles",
            "Measurable outcome",
        ],
    ),
    Question(
        id="beh_005",
        text="Tell me about a time you disagreed with your manager. How did you handle it?",
        type=_T.BEHAVIORAL,
        difficulty=_D.MEDIUM,
        category="communication",
        tags=["communication", "conflict-resolution"],
        evaluation_criteria=[
            "Respectful disagreement",
            "Data used to support the position",
            "Resolution reached",
        ],
    ),
    Question(
        id="beh_006",
        text="Give an example of a time you had to learn a new technology quickly.",
        type=_T.BEHAVIORAL,
        difficulty=_D.EASY,
        category="growth",
        tags=["learning", "adaptability"],
        evaluation_criteria=["Learning approach", "Applied result"],
    ),
    Question(
        id="beh_007",
        text="Describe a time when you improved a process or system at work.",
        type=_T.BEHAVIORAL,
        difficulty=_D.MEDIUM,
        category="innovation",
        tags=["innovation", "problem-solving"],
        evaluation_criteria=[
            "Problem identification",
            "Proposed improvement",
            "Measured impact",
        ],
    ),
    Question(
        id="beh_008",
        text="Tell me about a time you had to make a decision with incomplete information.",
        type=_T.BEHAVIORAL,
        difficulty=_D.HARD,
        category="decision-making",
        tags=["decision-making", "problem-solving"],
        evaluation_criteria=[
            "Assumptions identified",
            "Risk management",
            "Outcome and follow-up",
        ],
    ),
    Question(
        id="beh_009",
        text="Describe a time you mentored or helped a colleague grow.",
        type=_T.BEHAVIORAL,
        difficulty=_D.MEDIUM,
        category="leadership",
        tags=["leadership", "team-building", "management"],
        evaluation_criteria=[
            "Understanding of the colleague's needs",
            "Mentoring approach",
            "Growth achieved",
        ],
    ),
    Question(
        id="beh_010",
        text="Tell me about a time you received critical feedback. How did you respond?",
        type=_T.BEHAVIORAL,
        difficulty=_D.MEDIUM,
        category="growth",
        tags=["self-awareness", "learning"],
        evaluation_criteria=[
            "Openness to feedback",
            "Actions taken",
            "Change in behavior",
        ],
    ),
    Question(
        id="beh_011",
        text="Describe a project where you had to balance competing priorities from different stakeholders.",
        type=_T.BEHAVIORAL,
        difficulty=_D.HARD,
        category="stakeholder-management",
        tags=["stakeholder-management", "prioritization", "communication"],
        evaluation_criteria=[
            "Stakeholder mapping",
            "Prioritization framework",
            "Communication of trade-offs",
        ],
    ),
    Question(
        id="beh_012",
        text="Tell me about the most technically challenging problem you have solved.",
        type=_T.BEHAVIORAL,
        difficulty=_D.HARD,
        category="problem-solving",
        tags=["problem-solving", "technical-leadership"],
        evaluation_criteria=[
            "Complexity of the problem",
            "Investigation process",
            "Solution and its impact",
        ],
    ),
    Question(
        id="beh_013",
        text="Describe a time you had to convince a team to adopt your idea.",
        type=_T.BEHAVIORAL,
        difficulty=_D.MEDIUM,
        category="influence",
        tags=["communication", "leadership"],
        evaluation_criteria=[
            "Understanding of the audience",
            "Evidence presented",
            "Adoption outcome",
        ],
    ),
    Question(
        id="beh_014",
        text="Tell me about a time a project you worked on was at risk of failing. What did you do?",
        type=_T.BEHAVIORAL,
        difficulty=_D.HARD,
        category="ownership",
        tags=["ownership", "problem-solving", "project-management"],
        evaluation_criteria=[
            "Early detection of risk",
            "Corrective actions",
            "Final outcome",
        ],
    ),
    Question(
        id="beh_015",
        text="Give an example of how you built trust with a new team.",
        type=_T.BEHAVIORAL,
        difficulty=_D.MEDIUM,
        category="teamwork",
        tags=["teamwork", "team-building", "management"],
        evaluation_criteria=["Relationship building", "Consistency", "Result"],
    ),
    Question(
        id="lead_001",
        text="How do you handle an underperforming engineer on your team?",
        type=_T.BEHAVIORAL,
        difficulty=_D.HARD,
        category="leadership",
        role="engineering-manager",
        tags=["leadership", "management", "technical-leadership"],
        evaluation_criteria=[
            "Diagnosing root causes",
            "Clear expectations",
            "Support and follow-up",
            "Escalation when needed",
        ],
    ),
]


# ============================================================================
# SITUATIONAL QUESTIONS
# ============================================================================

SITUATIONAL_QUESTIONS: list[Question] = [
    Question(
        id="sit_001",
        text="What would you do if you discovered a critical bug in production right before a major release?",
        type=_T.SITUATIONAL,
        difficulty=_D.MEDIUM,
        category="crisis-management",
        tags=["crisis-management", "decision-making", "communication"],
        evaluation_criteria=[
            "Assessment of impact",
            "Stakeholder communication",
            "Decision on release",
        ],
    ),
    Question(
        id="sit_002",
        text="How would you handle a situation where your team disagrees on the technical approach for a project?",
        type=_T.SITUATIONAL,
        difficulty=_D.MEDIUM,
        category="teamwork",
        tags=["teamwork", "conflict-resolution", "technical-leadership"],
        evaluation_criteria=[
            "Facilitating discussion",
            "Objective evaluation criteria",
            "Commitment to a decision",
        ],
    ),
    Question(
        id="sit_003",
        text="Imagine a key client requests a feature that conflicts with your product roadmap. What do you do?",
        type=_T.SITUATIONAL,
        difficulty=_D.HARD,
        category="stakeholder-management",
        tags=["stakeholder-management", "product-thinking", "strategy"],
        evaluation_criteria=[
            "Understanding the client need",
            "Impact on roadmap",
            "Negotiated outcome",
        ],
    ),
    Question(
        id="sit_004",
        text="What would you do if you realized a project will miss its deadline by several weeks?",
        type=_T.SITUATIONAL,
        difficulty=_D.MEDIUM,
        category="project-management",
        tags=["project-management", "communication"],
        evaluation_criteria=[
            "Early transparency",
            "Options for scope or resources",
            "Revised plan",
        ],
    ),
    Question(
        id="sit_005",
        text="How would you respond if a security vulnerability were reported in a service you own?",
        type=_T.SITUATIONAL,
        difficulty=_D.HARD,
        category="crisis-management",
        tags=["security", "crisis-management", "ownership"],
        evaluation_criteria=[
            "Containment",
            "Risk assessment",
            "Disclosure and communication",
            "Prevention",
        ],
    ),
    Question(
        id="sit_006",
        text="If you joined a team with no automated tests, how would you improve quality without halting delivery?",
        type=_T.SITUATIONAL,
        difficulty=_D.MEDIUM,
        category="engineering-practice",
        tags=["testing", "automation", "technical-leadership"],
        evaluation_criteria=[
            "Incremental adoption",
            "Prioritizing risky areas",
            "Team buy-in",
        ],
    ),
    Question(
        id="sit_007",
        text="What would you do if two senior stakeholders gave you contradictory requirements?",
        type=_T.SITUATIONAL,
        difficulty=_D.EASY,
        category="stakeholder-management",
        tags=["stakeholder-management", "communication"],
        evaluation_criteria=["Clarifying goals", "Escalation path"],
    ),
]


# ============================================================================
# COMPANY-SPECIFIC QUESTIONS
# ============================================================================

COMPANY_QUESTIONS: list[Question] = [
    Question(
        id="google_001",
        text="How would you improve Google Maps for users in areas with poor connectivity?",
        type=_T.COMPANY_SPECIFIC,
        difficulty=_D.HARD,
        category="product",
        company="google",
        tags=["product-thinking", "mobile"],
        evaluation_criteria=["User needs", "Offline capabilities", "Success metrics"],
    ),
    Question(
        id="google_002",
        text="Why do you want to work at Google, and which product would you most like to work on?",
        type=_T.COMPANY_SPECIFIC,
        difficulty=_D.MEDIUM,
        category="motivation",
        company="google",
        tags=["motivation"],
        evaluation_criteria=["Knowledge of the company", "Genuine motivation"],
    ),
    Question(
        id="amazon_001",
        text="Tell me about a time you demonstrated customer obsession.",
        type=_T.COMPANY_SPECIFIC,
        difficulty=_D.MEDIUM,
        category="leadership-principles",
        company="amazon",
        tags=["leadership", "customer-focus"],
        evaluation_criteria=["Customer impact", "Specific actions", "Measured outcome"],
    ),
    Question(
        id="amazon_002",
        text="Describe a time you disagreed and committed. How did it turn out?",
        type=_T.COMPANY_SPECIFIC,
        difficulty=_D.HARD,
        category="leadership-principles",
        company="amazon",
        tags=["leadership", "communication"],
        evaluation_criteria=["Clear disagreement", "Commitment", "Outcome"],
    ),
    Question(
        id="amazon_003",
        text="Tell me about a time you invented and simplified a complex process.",
        type=_T.COMPANY_SPECIFIC,
        difficulty=_D.HARD,
        category="leadership-principles",
        company="amazon",
        tags=["innovation"],
        evaluation_criteria=["Original idea", "Simplification", "Adoption"],
    ),
    Question(
        id="microsoft_001",
        text="How would you make a developer tool more accessible to people with disabilities?",
        type=_T.COMPANY_SPECIFIC,
        difficulty=_D.MEDIUM,
        category="product",
        company="microsoft",
        tags=["accessibility", "product-thinking"],
        evaluation_criteria=["Inclusive design", "Testing with users", "Standards"],
    ),
    Question(
        id="microsoft_002",
        text="Describe how you have embraced a growth mindset in your career.",
        type=_T.COMPANY_SPECIFIC,
        difficulty=_D.EASY,
        category="culture",
        company="microsoft",
        tags=["learning", "self-awareness"],
        evaluation_criteria=["Learning from setbacks", "Curiosity"],
    ),
]


# ============================================================================
# GENERAL QUESTIONS
# ============================================================================

GENERAL_QUESTIONS: list[Question] = [
    Question(
        id="gen_001",
        text="Tell me about yourself and your professional background.",
        type=_T.GENERAL,
        difficulty=_D.EASY,
        category="introduction",
        tags=["introduction"],
        evaluation_criteria=["Relevant experience", "Career narrative", "Concise delivery"],
    ),
    Question(
        id="gen_002",
        text="Why are you interested in this role and what excites you about it?",
        type=_T.GENERAL,
        difficulty=_D.EASY,
        category="motivation",
        tags=["motivation"],
        evaluation_criteria=["Alignment with role", "Enthusiasm"],
    ),
    Question(
        id="gen_003",
        text="Where do you see your career heading in the next five years?",
        type=_T.GENERAL,
        difficulty=_D.MEDIUM,
        category="motivation",
        tags=["career-goals"],
        evaluation_criteria=["Realistic goals", "Connection to the role"],
    ),
    Question(
        id="gen_004",
        text="What kind of work environment helps you do your best work?",
        type=_T.GENERAL,
        difficulty=_D.MEDIUM,
        category="culture",
        tags=["culture-fit"],
        evaluation_criteria=["Self-awareness", "Concrete examples"],
    ),
]


QUESTION_CATALOG: list[Question] = [
    *TECHNICAL_QUESTIONS,
    *BEHAVIORAL_QUESTIONS,
    *SITUATIONAL_QUESTIONS,
    *COMPANY_QUESTIONS,
    *GENERAL_QUESTIONS,
]


def get_role_tags(role: str) -> list[str]:
    """Get the topic tags that identify questions for a role."""
    return ROLE_TAGS.get(role, [])
