"""Fixed veterinary knowledge base and keyword retrieval."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class KnowledgeEntry:
    topic: str
    content: str

    def matches(self, query: str) -> bool:
        """Any topic word appears in the query, or the whole query appears in the body."""
        q = query.lower()
        if any(word in q for word in self.topic.lower().split()):
            return True
        return q in self.content.lower()

    def render(self) -> str:
        return f"[Source: {self.topic}] {self.content}"


VET_KNOWLEDGE_BASE: tuple[KnowledgeEntry, ...] = (
    KnowledgeEntry(
        "Urinary Issues",
        "Male cats are prone to urethral obstructions. Straining to urinate, frequent trips to "
        "the litter box without output, or yowling while urinating are life-threatening "
        "emergencies requiring immediate vet intervention.",
    ),
    KnowledgeEntry(
        "Loss of Appetite",
        "If a cat doesn't eat for more than 24-48 hours, they are at high risk for Hepatic "
        "Lipidosis (fatty liver disease), which can be fatal. Inappetence in cats is always a "
        "clinically significant symptom.",
    ),
    KnowledgeEntry(
        "Toxic Plants",
        "Lilies (Lilium and Hemerocallis species) are extremely toxic to cats. Ingesting even a "
        "small amount of pollen or water from a vase can cause acute kidney failure. Immediate "
        "decontamination is required.",
    ),
    KnowledgeEntry(
        "Stress and Behavior",
        "Cats are creatures of habit. Changes in environment (moving, new pets, construction) "
        "often lead to stress-induced behaviors like over-grooming, hiding, or urinating outside "
        "the box (cystitis).",
    ),
    KnowledgeEntry(
        "Vomiting",
        "Occasional hairballs are normal, but frequent vomiting (more than once a week) or "
        "projectile vomiting can indicate inflammatory bowel disease, kidney issues, or "
        "hyperthyroidism.",
    ),
    KnowledgeEntry(
        "Dental Health",
        "Periodontal disease affects 70% of cats by age 3. Bad breath, drooling, or dropping "
        "food can indicate painful resorptive lesions or gingivitis requiring professional "
        "cleaning.",
    ),
)

FALLBACK_CONTEXT = (
    "Consult general feline veterinary standards for common health and behavioral issues."
)


def retrieve_entries(
    query: str, knowledge: tuple[KnowledgeEntry, ...] = VET_KNOWLEDGE_BASE
) -> list[KnowledgeEntry]:
    if not query.strip():
        return []
    return [entry for entry in knowledge if entry.matches(query)]


def retrieve_context(
    query: str, knowledge: tuple[KnowledgeEntry, ...] = VET_KNOWLEDGE_BASE
) -> str:
    """Render matching entries one per line, or the generic fallback. Never empty."""
    entries = retrieve_entries(query, knowledge)
    if not entries:
        return FALLBACK_CONTEXT
    return "\n".join(entry.render() for entry in entries)
