DIAGNOSIS_PROMPT = """Analyze this plant image for pest infestations or diseases. Answer in JSON format with the following structure:
{
  "diagnosis": {
    "hasPests": true|false,
    "pestIdentified": "Common name of pest (if any)",
    "scientificName": "Scientific name of pest (if any)",
    "severity": "low|medium|high",
    "affectedArea": "which part of plant is affected",
    "symptoms": ["list", "of", "visible", "symptoms"]
  },
  "damage": {
    "description": "Description of damage to plant",
    "progressStage": "early|moderate|advanced",
    "affectedParts": ["list", "of", "affected", "plant", "parts"]
  },
  "treatment": {
    "organic": ["list", "of", "organic", "treatments"],
    "chemical": ["list", "of", "chemical", "treatments"],
    "cultural": ["list", "of", "cultural", "practices"],
    "urgency": "low|medium|high"
  },
  "prevention": ["list", "of", "preventative", "measures"],
  "notes": "Additional observations or recommendations"
}
If no pests are visible, set hasPests to false and provide general plant health assessment in the notes section."""


def build_diagnosis_prompt() -> str:
    """Return the instruction asking the model for a structured JSON diagnosis."""
    return DIAGNOSIS_PROMPT
