"""Prompt templates for the assistant chat."""

from __future__ import annotations

from typing import List

from doormate.models.product import ProductRecord

SYSTEM_PROMPT = """You are DoorMate, an AI assistant specializing in industrial doors, gates, motors, and control systems.
Your primary role is to help door engineers and technicians with:
1. Installation guidance
2. Maintenance procedures
3. Troubleshooting issues
4. Technical specifications
5. Safety requirements and regulations

Key behaviors:
- Always provide practical, actionable advice
- Reference specific manual sections when possible
- Include safety warnings where relevant
- If you're unsure about any technical detail, say so rather than guessing
- Focus only on door/gate related queries, politely decline other topics
- Use technical language but explain complex terms
- Format responses with clear steps and bullet points for better readability

You have access to product manuals and specifications. When providing advice:
- Cite specific manual sections
- Reference relevant safety standards
- Include model-specific details when available
- Suggest when professional inspection might be needed"""


def format_product_context(product: ProductRecord) -> str:
    lines: List[str] = [
        "Product Context:",
        f"This conversation is about the {product.name} ({product.model}), "
        f"a {product.category} product manufactured by {product.brand.name}.",
    ]
    if product.specifications:
        specs = "; ".join(str(spec) for spec in product.specifications)
        lines.append(f"Key specifications: {specs}")
    if product.features:
        lines.append(f"Notable features: {', '.join(product.features)}")
    if product.applications:
        lines.append(f"Common applications: {', '.join(product.applications)}")
    if product.safety_features:
        lines.append(f"Safety features: {', '.join(product.safety_features)}")
    if product.manuals:
        lines.append(f"Available manuals: {', '.join(m.title for m in product.manuals)}")
    return "\n".join(lines)


def format_manual_context(title: str, rendered_sections: str) -> str:
    return f"Relevant content from {title}: {rendered_sections}"


def format_highlight(highlighted_text: str) -> str:
    return f'User has highlighted this text from the manual:\n"{highlighted_text}"'
