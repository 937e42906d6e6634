def build_validity_prompt(word: str) -> str:
    """
    Build the user prompt asking whether a word is valid.

    Args:
        word: The assembled candidate, any case

    Returns:
        Formatted prompt string
    """
    lines = []

    lines.append("## Candidate")
    lines.append(f"Word: {word.upper()}")
    lines.append(f"Length: {len(word)} letters")
    lines.append("")
    lines.append("Is this a valid English word? Answer with <answer>YES</answer> or <answer>NO</answer>.")

    return "\n".join(lines)
