"""Prompt templates, research focus areas and article types."""

from datetime import date
from typing import Dict, List

from ..models import Category
from .models import ArticleType, ResearchFocus

PUBLICATION = "AI Credit News"

CATEGORY_RESEARCH_FOCUS: Dict[str, ResearchFocus] = {
    "credit-scoring": ResearchFocus(
        name="Credit Scoring",
        topics=[
            "AI/ML credit scoring models",
            "alternative data for credit decisions",
            "credit bureau innovations",
            "FICO score alternatives",
            "credit decisioning automation",
            "real-time credit assessments",
        ],
        competitors=["Experian", "Equifax", "TransUnion", "FICO", "VantageScore"],
        keywords=["credit score", "creditworthiness", "credit bureau", "credit risk model", "scoring algorithm"],
    ),
    "fraud-detection": ResearchFocus(
        name="Fraud Detection",
        topics=[
            "AI fraud detection systems",
            "real-time transaction monitoring",
            "identity verification AI",
            "synthetic identity fraud",
            "payment fraud prevention",
            "behavioral biometrics",
        ],
        competitors=["Featurespace", "Feedzai", "NICE Actimize", "SAS"],
        keywords=["fraud detection", "anti-money laundering", "KYC", "identity verification", "financial crime"],
    ),
    "income-employment": ResearchFocus(
        name="Income & Employment",
        topics=[
            "AI income verification",
            "employment verification automation",
            "cash flow analysis AI",
            "capacity to pay assessment",
            "open banking for affordability",
            "payroll data aggregation",
        ],
        competitors=["Argyle", "Pinwheel", "Truework", "Plaid", "Yodlee"],
        keywords=["income verification", "employment verification", "cash flow", "affordability", "capacity to pay"],
    ),
    "regulatory-compliance": ResearchFocus(
        name="Regulatory & Compliance",
        topics=[
            "AI governance in finance",
            "fair lending compliance",
            "model explainability requirements",
            "CFPB AI regulations",
            "algorithmic bias audits",
            "AI transparency requirements",
        ],
        competitors=["Compliance.ai", "Behavox", "Corlytics"],
        keywords=["AI regulation", "fair lending", "explainability", "model governance", "compliance automation"],
    ),
    "lending-automation": ResearchFocus(
        name="Lending Automation",
        topics=[
            "AI underwriting systems",
            "automated loan decisioning",
            "digital lending platforms",
            "loan origination automation",
            "mortgage AI innovations",
            "small business lending AI",
        ],
        competitors=["Blend", "Upstart", "nCino", "Zest AI"],
        keywords=["automated underwriting", "loan origination", "digital lending", "AI underwriter", "loan automation"],
    ),
}

ARTICLE_TYPES: Dict[str, ArticleType] = {
    t.key: t
    for t in [
        ArticleType(
            key="trend_analysis",
            name="Trend Analysis",
            description="Deep dive into emerging trends in the category",
            min_words=800,
            max_words=1200,
        ),
        ArticleType(
            key="product_launch",
            name="Product/Service Launch",
            description="Coverage of new products or services in the market",
            min_words=600,
            max_words=900,
        ),
        ArticleType(
            key="market_insight",
            name="Market Insight",
            description="Analysis of market dynamics, investments, or competitive landscape",
            min_words=700,
            max_words=1000,
        ),
        ArticleType(
            key="regulatory_update",
            name="Regulatory Update",
            description="Coverage of regulatory changes and their implications",
            min_words=600,
            max_words=900,
        ),
        ArticleType(
            key="future_outlook",
            name="Future Outlook",
            description="Forward-looking analysis and predictions",
            min_words=800,
            max_words=1100,
        ),
    ]
}


def research_focus_for(category: Category) -> ResearchFocus:
    """Get the research focus for a category, deriving one for unlisted slugs."""
    if category.slug in CATEGORY_RESEARCH_FOCUS:
        return CATEGORY_RESEARCH_FOCUS[category.slug]

    topic = category.description or f"AI applications in {category.name.lower()}"
    return ResearchFocus(
        name=category.name,
        topics=[topic],
        keywords=[category.name.lower()],
    )


def format_category_list(categories: List[Category]) -> str:
    """Render categories as the numbered list shown to the classifier."""
    lines = []
    for i, category in enumerate(categories, 1):
        line = f"{i}. {category.slug}"
        if category.description:
            line += f" - {category.description}"
        lines.append(line)
    return "\n".join(lines)


def build_prefilter_prompt(title: str, source: str) -> str:
    """Build the cheap YES/NO relevance check."""
    return f"""Is this article likely about AI or machine learning applied to credit, lending, banking or financial services?

Title: {title}
Source: {source}

Answer with exactly one word: YES or NO."""


def build_analysis_prompt(
    title: str,
    source: str,
    content: str,
    categories: List[Category],
    max_content_chars: int = 3000,
) -> str:
    """Build the full relevance, category and summary analysis prompt."""
    excerpt = content[:max_content_chars]
    fallback = categories[0].slug if categories else "none"

    return f"""Analyze this article and determine its relevance to AI applications in credit scoring and banking.

Title: {title}
Source: {source}
Content: {excerpt}

We are looking for articles specifically about the INTERSECTION of:
- Artificial Intelligence / Machine Learning AND
- Credit scoring, lending, banking, financial services, fintech

Articles that are ONLY about general AI (without finance focus) should score low.
Articles that are ONLY about banking (without AI focus) should score low.
Articles about AI IN banking/credit/finance should score high.

Categories to choose from:
{format_category_list(categories)}

Return a JSON object with this exact structure:
{{
  "relevance_score": <number 0-10>,
  "is_relevant": <boolean>,
  "category": "<category slug from the list>",
  "tags": ["tag1", "tag2", "tag3"],
  "summary": "<2-3 sentence summary accessible to technical and non-technical readers>",
  "difficulty_level": "<beginner|intermediate|advanced>",
  "reasoning": "<brief 1-2 sentence explanation>"
}}

If the article is not relevant, use "{fallback}" as the category and set is_relevant to false."""


def build_research_prompt(focus: ResearchFocus, primary_topic: str, article_type: ArticleType) -> str:
    """Build the research-notes prompt for a generated article."""
    players = ", ".join(focus.competitors) or "leading banks and fintechs"
    return f"""You are a financial journalism research assistant. Research and gather information for an article about "{primary_topic}" in the context of {focus.name}.

RESEARCH FOCUS:
- Category: {focus.name}
- Primary Topic: {primary_topic}
- Article Type: {article_type.name}
- Related Keywords: {", ".join(focus.keywords)}
- Industry Players: {players}

Provide research notes covering:
1. CURRENT LANDSCAPE: recent developments, key players, market dynamics
2. KEY INSIGHTS: why this matters now, technical innovations, challenges
3. DATA POINTS: 2-3 realistic statistics attributed to hypothetical industry reports
4. EXPERT PERSPECTIVES: banks, fintechs and regulators
5. FUTURE IMPLICATIONS: where this is heading

Focus on the intersection of AI/ML and {focus.name.lower()}. Keep a neutral, journalistic perspective and do not favor or unfairly criticize any company."""


def build_writing_prompt(
    focus: ResearchFocus,
    primary_topic: str,
    article_type: ArticleType,
    research_notes: str,
) -> str:
    """Build the article-writing prompt from research notes."""
    return f"""You are a senior financial technology journalist writing for {PUBLICATION}, a publication covering AI applications in credit scoring, banking, and financial services.

RESEARCH NOTES:
{research_notes}

ARTICLE REQUIREMENTS:
- Type: {article_type.name} ({article_type.description})
- Category: {focus.name}
- Primary Topic: {primary_topic}
- Word Count: {article_type.min_words}-{article_type.max_words} words

Write a professional, balanced article with a specific headline, a lead paragraph
that establishes significance, an inverted-pyramid body, analysis of the
implications for institutions, fintechs, consumers and regulators, and a short
conclusion. Write original content rather than a summary of the notes, and
attribute claims with phrases like "industry analysts suggest".

Return a JSON object:
{{
  "title": "<headline>",
  "summary": "<2-3 sentence summary for preview>",
  "content": "<full article, paragraphs separated by blank lines>",
  "difficulty_level": "<beginner|intermediate|advanced>",
  "tags": ["tag1", "tag2", "tag3", "tag4", "tag5"]
}}"""


def format_article_digest(articles: List[Dict], max_articles: int = 20) -> str:
    """Render approved articles as the bullet list an editorial is written from."""
    lines = []
    for article in articles[:max_articles]:
        line = f"- [{article.get('category_name') or 'General'}] {article['title']}"
        if article.get("source"):
            line += f" ({article['source']})"
        if article.get("summary"):
            line += f": {article['summary']}"
        lines.append(line)
    return "\n".join(lines)


def build_editorial_prompt(articles: List[Dict], week_start: date, week_end: date) -> str:
    """Build the weekly editorial prompt from the week's approved articles."""
    return f"""You are the editor of {PUBLICATION}, a publication covering AI applications in credit scoring, banking, and financial services.

Write the weekly editorial for {week_start:%B %d} to {week_end:%B %d, %Y}, drawing on the articles we published:

{format_article_digest(articles)}

The editorial should:
- Identify the two or three themes that connect this week's stories
- Explain what they mean for lenders, fintechs, consumers and regulators
- Refer to specific stories where they support the argument
- Close with what readers should watch for next week
- Run 400-600 words in Markdown, with no headline inside the body

Return a JSON object:
{{
  "title": "<editorial headline>",
  "content": "<editorial body in Markdown>"
}}"""
