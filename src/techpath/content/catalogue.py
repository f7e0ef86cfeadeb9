"""Course catalogue and question bank seed data.

Each course has a fixed, ordered list of multiple-choice questions. The
catalogue is static per deployment; ``total_questions`` in the courses table
is derived from it.
"""

from __future__ import annotations

COURSE_CATALOGUE: list[dict] = [
    # Data Analyst
    {
        "id": "data-analyst-easy",
        "role": "Data Analyst",
        "difficulty": "easy",
        "title": "Understanding Business Metrics",
        "description": "Read simple numbers the way a business does.",
        "order_index": 1,
        "questions": [
            {
                "prompt": "10,000 people visited a website and 200 signed up. What is the conversion rate?",
                "options": {"a": "20%", "b": "2%", "c": "0.2%", "d": "50%"},
                "answer": "b",
                "explanation": "200 / 10,000 = 0.02, so 2% of visitors took the desired action.",
                "points": 10,
            },
            {
                "prompt": "Mon 3, Tue 5, Wed 2, Thu 7, Fri 5 apples sold. Which day sold the most?",
                "options": {"a": "Monday", "b": "Tuesday", "c": "Wednesday", "d": "Thursday"},
                "answer": "d",
                "explanation": "Thursday's 7 is the largest value in the series.",
                "points": 10,
            },
            {
                "prompt": "What is the average of 4, 8 and 12?",
                "options": {"a": "6", "b": "8", "c": "10", "d": "12"},
                "answer": "b",
                "explanation": "(4 + 8 + 12) / 3 = 24 / 3 = 8.",
                "points": 10,
            },
            {
                "prompt": "Which chart best shows how a whole splits into parts?",
                "options": {"a": "Line chart", "b": "Scatter plot", "c": "Pie chart", "d": "Histogram"},
                "answer": "c",
                "explanation": "A pie chart shows each part as a share of the total.",
                "points": 10,
            },
        ],
    },
    {
        "id": "data-analyst-medium",
        "role": "Data Analyst",
        "difficulty": "medium",
        "title": "Data Interpretation",
        "description": "Spot growth, trends and outliers in small datasets.",
        "order_index": 2,
        "questions": [
            {
                "prompt": "Sales: Q1 $100k, Q2 $120k, Q3 $110k, Q4 $140k. Which quarter grew most versus the previous one?",
                "options": {"a": "Q2", "b": "Q3", "c": "Q4", "d": "Q1"},
                "answer": "c",
                "explanation": "Q4 grew $30k on $110k, about 27%, the largest percentage increase.",
                "points": 15,
            },
            {
                "prompt": "Which value is an outlier in 12, 14, 13, 15, 98, 14?",
                "options": {"a": "12", "b": "15", "c": "98", "d": "14"},
                "answer": "c",
                "explanation": "98 sits far outside the range of the other values.",
                "points": 15,
            },
            {
                "prompt": "What is the median of 3, 9, 4, 7, 5?",
                "options": {"a": "4", "b": "5", "c": "7", "d": "5.6"},
                "answer": "b",
                "explanation": "Sorted: 3, 4, 5, 7, 9. The middle value is 5.",
                "points": 15,
            },
            {
                "prompt": "Two metrics rise together. What can you conclude?",
                "options": {
                    "a": "One causes the other",
                    "b": "They are correlated",
                    "c": "They are unrelated",
                    "d": "The data is wrong",
                },
                "answer": "b",
                "explanation": "Moving together shows correlation, which alone does not prove causation.",
                "points": 15,
            },
        ],
    },
    {
        "id": "data-analyst-hard",
        "role": "Data Analyst",
        "difficulty": "hard",
        "title": "Analytics Puzzle",
        "description": "Reason about sampling, bias and significance.",
        "order_index": 3,
        "questions": [
            {
                "prompt": "A survey only reaches people who already use your app. This is an example of:",
                "options": {"a": "Selection bias", "b": "Random sampling", "c": "Overfitting", "d": "Seasonality"},
                "answer": "a",
                "explanation": "The sample excludes non-users, so it is not representative.",
                "points": 20,
            },
            {
                "prompt": "An A/B test reports p = 0.03 with a 0.05 threshold. What does that suggest?",
                "options": {
                    "a": "The result is not significant",
                    "b": "The difference is unlikely to be chance alone",
                    "c": "Variant B is 3% better",
                    "d": "The test must be rerun",
                },
                "answer": "b",
                "explanation": "p below the threshold means the observed difference is unlikely under no effect.",
                "points": 20,
            },
            {
                "prompt": "Revenue doubled while customers grew 25%. Average revenue per customer changed by:",
                "options": {"a": "+25%", "b": "+60%", "c": "+75%", "d": "+100%"},
                "answer": "b",
                "explanation": "2.0 / 1.25 = 1.6, a 60% increase per customer.",
                "points": 20,
            },
            {
                "prompt": "Which SQL clause filters rows after aggregation?",
                "options": {"a": "WHERE", "b": "GROUP BY", "c": "HAVING", "d": "ORDER BY"},
                "answer": "c",
                "explanation": "HAVING applies conditions to grouped results; WHERE filters before grouping.",
                "points": 20,
            },
        ],
    },
    # UX Designer
    {
        "id": "ux-designer-easy",
        "role": "UX Designer",
        "difficulty": "easy",
        "title": "User-Centered Design",
        "description": "Start from what users need.",
        "order_index": 1,
        "questions": [
            {
                "prompt": "Users abandon their carts before paying. What is the first step?",
                "options": {
                    "a": "Redesign the entire website",
                    "b": "Research why users are abandoning carts",
                    "c": "Add more payment options",
                    "d": "Make the checkout button bigger",
                },
                "answer": "b",
                "explanation": "Understand the problem before designing a solution.",
                "points": 10,
            },
            {
                "prompt": "What is a persona?",
                "options": {
                    "a": "A real customer's account",
                    "b": "A fictional profile representing a user group",
                    "c": "A colour palette",
                    "d": "A marketing slogan",
                },
                "answer": "b",
                "explanation": "Personas summarise research about a group of users.",
                "points": 10,
            },
            {
                "prompt": "A low-fidelity wireframe is mainly used to:",
                "options": {
                    "a": "Test layout and flow cheaply",
                    "b": "Hand off final visuals",
                    "c": "Write production code",
                    "d": "Choose fonts",
                },
                "answer": "a",
                "explanation": "Rough wireframes let you iterate on structure quickly.",
                "points": 10,
            },
            {
                "prompt": "Which is an accessibility improvement?",
                "options": {
                    "a": "Light grey text on white",
                    "b": "Descriptive alt text on images",
                    "c": "Autoplaying video with sound",
                    "d": "Icons without labels",
                },
                "answer": "b",
                "explanation": "Alt text lets screen reader users understand images.",
                "points": 10,
            },
        ],
    },
    {
        "id": "ux-designer-medium",
        "role": "UX Designer",
        "difficulty": "medium",
        "title": "Usability Testing",
        "description": "Plan and read usability sessions.",
        "order_index": 2,
        "questions": [
            {
                "prompt": "How many participants typically uncover most usability issues in one round?",
                "options": {"a": "1", "b": "5", "c": "50", "d": "500"},
                "answer": "b",
                "explanation": "Around five users surface most common problems; test again after fixes.",
                "points": 15,
            },
            {
                "prompt": "During a test, a participant asks how a feature works. You should:",
                "options": {
                    "a": "Explain it immediately",
                    "b": "Ask what they expect it to do",
                    "c": "End the session",
                    "d": "Skip the task",
                },
                "answer": "b",
                "explanation": "Turning the question back reveals their mental model without biasing them.",
                "points": 15,
            },
            {
                "prompt": "Task success rate measures:",
                "options": {
                    "a": "How pretty the UI is",
                    "b": "The share of users who complete a task",
                    "c": "Page load time",
                    "d": "Number of clicks on ads",
                },
                "answer": "b",
                "explanation": "It is the proportion of participants who finish the task.",
                "points": 15,
            },
            {
                "prompt": "Card sorting is used to design:",
                "options": {"a": "Information architecture", "b": "Logos", "c": "Databases", "d": "Pricing"},
                "answer": "a",
                "explanation": "Users group content, which informs navigation and labels.",
                "points": 15,
            },
        ],
    },
    {
        "id": "ux-designer-hard",
        "role": "UX Designer",
        "difficulty": "hard",
        "title": "Design Systems",
        "description": "Scale consistent design across products.",
        "order_index": 3,
        "questions": [
            {
                "prompt": "Design tokens store:",
                "options": {
                    "a": "User passwords",
                    "b": "Named design decisions such as colours and spacing",
                    "c": "Analytics events",
                    "d": "Test scripts",
                },
                "answer": "b",
                "explanation": "Tokens name reusable values so every platform stays consistent.",
                "points": 20,
            },
            {
                "prompt": "Minimum WCAG AA contrast for normal body text is:",
                "options": {"a": "2:1", "b": "3:1", "c": "4.5:1", "d": "10:1"},
                "answer": "c",
                "explanation": "AA requires 4.5:1 for normal text and 3:1 for large text.",
                "points": 20,
            },
            {
                "prompt": "Two teams built different date pickers. The best design-system response is:",
                "options": {
                    "a": "Keep both",
                    "b": "Audit needs and publish one shared component",
                    "c": "Ban date pickers",
                    "d": "Let each screen choose",
                },
                "answer": "b",
                "explanation": "Consolidating into one documented component reduces inconsistency.",
                "points": 20,
            },
            {
                "prompt": "Which metric best shows design-system adoption?",
                "options": {
                    "a": "Number of Figma files",
                    "b": "Share of product UI built from system components",
                    "c": "Team size",
                    "d": "Number of colours",
                },
                "answer": "b",
                "explanation": "Coverage of shipped UI reflects real adoption.",
                "points": 20,
            },
        ],
    },
    # Software Engineer
    {
        "id": "software-engineer-easy",
        "role": "Software Engineer",
        "difficulty": "easy",
        "title": "Programming Basics",
        "description": "Variables, loops and version control.",
        "order_index": 1,
        "questions": [
            {
                "prompt": "What does a loop do?",
                "options": {
                    "a": "Stores a value",
                    "b": "Repeats a block of code",
                    "c": "Deletes a file",
                    "d": "Draws a chart",
                },
                "answer": "b",
                "explanation": "Loops run the same instructions several times.",
                "points": 10,
            },
            {
                "prompt": "Git is used for:",
                "options": {"a": "Version control", "b": "Image editing", "c": "Email", "d": "Spreadsheets"},
                "answer": "a",
                "explanation": "Git tracks changes to code over time.",
                "points": 10,
            },
            {
                "prompt": "A bug is:",
                "options": {
                    "a": "A new feature",
                    "b": "An error that makes software behave unexpectedly",
                    "c": "A type of database",
                    "d": "A design document",
                },
                "answer": "b",
                "explanation": "Bugs are defects in behaviour.",
                "points": 10,
            },
            {
                "prompt": "Which structure holds an ordered collection of items?",
                "options": {"a": "List", "b": "Boolean", "c": "Integer", "d": "Comment"},
                "answer": "a",
                "explanation": "Lists (arrays) keep items in order.",
                "points": 10,
            },
        ],
    },
    {
        "id": "software-engineer-medium",
        "role": "Software Engineer",
        "difficulty": "medium",
        "title": "Working With APIs",
        "description": "HTTP, status codes and testing.",
        "order_index": 2,
        "questions": [
            {
                "prompt": "Which HTTP status means 'not found'?",
                "options": {"a": "200", "b": "301", "c": "404", "d": "500"},
                "answer": "c",
                "explanation": "404 is returned when the resource does not exist.",
                "points": 15,
            },
            {
                "prompt": "Which HTTP method is normally used to create a resource?",
                "options": {"a": "GET", "b": "POST", "c": "HEAD", "d": "OPTIONS"},
                "answer": "b",
                "explanation": "POST submits data to create a new resource.",
                "points": 15,
            },
            {
                "prompt": "A unit test checks:",
                "options": {
                    "a": "The whole system end to end",
                    "b": "One small piece of code in isolation",
                    "c": "Server hardware",
                    "d": "Marketing copy",
                },
                "answer": "b",
                "explanation": "Unit tests isolate a single function or class.",
                "points": 15,
            },
            {
                "prompt": "JSON is:",
                "options": {
                    "a": "A programming language",
                    "b": "A text format for structured data",
                    "c": "A database engine",
                    "d": "An operating system",
                },
                "answer": "b",
                "explanation": "JSON is a lightweight data-interchange format.",
                "points": 15,
            },
        ],
    },
    {
        "id": "software-engineer-hard",
        "role": "Software Engineer",
        "difficulty": "hard",
        "title": "Systems Thinking",
        "description": "Complexity, caching and reliability.",
        "order_index": 3,
        "questions": [
            {
                "prompt": "Binary search on a sorted list of n items runs in:",
                "options": {"a": "O(1)", "b": "O(log n)", "c": "O(n)", "d": "O(n^2)"},
                "answer": "b",
                "explanation": "Each step halves the search space.",
                "points": 20,
            },
            {
                "prompt": "Why retry a request only if the operation is idempotent?",
                "options": {
                    "a": "Retries are slow",
                    "b": "Repeating it must not change the result",
                    "c": "Servers reject retries",
                    "d": "It saves memory",
                },
                "answer": "b",
                "explanation": "Idempotent operations give the same outcome however often they run.",
                "points": 20,
            },
            {
                "prompt": "A cache is most helpful when data is:",
                "options": {
                    "a": "Written constantly and never read",
                    "b": "Read often and changes rarely",
                    "c": "Unique per request",
                    "d": "Encrypted",
                },
                "answer": "b",
                "explanation": "Caching pays off for frequently read, slowly changing data.",
                "points": 20,
            },
            {
                "prompt": "A database unique constraint helps prevent:",
                "options": {
                    "a": "Slow queries",
                    "b": "Duplicate rows from concurrent inserts",
                    "c": "Network outages",
                    "d": "Disk fragmentation",
                },
                "answer": "b",
                "explanation": "The database rejects the second insert of the same key.",
                "points": 20,
            },
        ],
    },
]
