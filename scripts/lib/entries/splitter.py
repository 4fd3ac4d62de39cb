"""Split raw entry lines into fields."""

MAX_FIELDS = 3
MIN_SPACE_RUN = 4


def split_fields(line: str) -> list[str]:
    """
    Split one line into at most three trimmed fields.

    Rules:
    - A single TAB, or a run of 4+ spaces, separates fields
    - A run of 1-3 spaces is ordinary content
    - After the second separator the rest of the line is the third field,
      separators included
    - Empty fields between separators are kept; a whitespace-only line
      yields no fields
    """
    if not line.strip():
        return []

    fields = []
    start = 0
    i = 0
    n = len(line)

    while i < n and len(fields) < MAX_FIELDS - 1:
        ch = line[i]
        if ch == "\t":
            fields.append(line[start:i])
            i += 1
            start = i
            continue
        if ch == " ":
            j = i
            while j < n and line[j] == " ":
                j += 1
            if j - i >= MIN_SPACE_RUN:
                fields.append(line[start:i])
                start = j
            i = j
            continue
        i += 1

    fields.append(line[start:])
    return [f.strip() for f in fields]
