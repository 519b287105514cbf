from roster.config import SourceLayout

SOURCE_HEADER = [
    "ClassName", "Subject", "Term", "Teacher", "School", "Room", "Period", "Section", "Course", "Status",
    "StudentID", "LastName", "FirstName", "MI", "Grade", "TestDate", "RIT", "Percent", "Percentile",
]


def source_row(category, subject, identifier, last, first, grade, score, layout=SourceLayout()):
    row = ["x"] * layout.span
    row[layout.category] = category
    row[layout.subject] = subject
    row[layout.identifier] = identifier
    row[layout.last_name] = last
    row[layout.first_name] = first
    row[layout.grade] = grade
    row[layout.score] = score
    return row


def source_grid(*rows):
    return [list(SOURCE_HEADER)] + [list(r) for r in rows]


def season_grid(label, *rows):
    return [["Student ID", "Last Name", "First Name", "Subject", "Grade", label]] + [list(r) for r in rows]
