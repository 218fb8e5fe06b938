from partygames import db
from partygames.models import Question

# (type, mode, German, English)
BUILTIN_QUESTIONS = [
    ('truth', 'normal', 'Was ist dein peinlichster Moment?', 'What is your most embarrassing moment?'),
    ('truth', 'normal', 'Was ist deine größte Angst?', 'What is your biggest fear?'),
    ('truth', 'normal', 'Was war dein schlimmstes Date?', 'What was your worst date?'),
    ('dare', 'normal', 'Mache deinen besten Tanzschritt', 'Show your best dance move'),
    ('dare', 'normal', 'Rufe jemanden an und singe für sie/ihn', 'Call someone and sing for them'),
    ('dare', 'normal', 'Mache ein lustiges Selfie', 'Take a funny selfie'),
    ('truth', 'kids', 'Was ist dein Lieblingstier?', 'What is your favourite animal?'),
    ('truth', 'kids', 'Welche Superkraft hättest du gerne?', 'Which superpower would you like to have?'),
    ('dare', 'kids', 'Hüpfe zehnmal auf einem Bein', 'Hop ten times on one leg'),
    ('dare', 'kids', 'Mache ein Tiergeräusch nach', 'Imitate an animal sound'),
    ('truth', 'spicy', 'Wer in dieser Runde gefällt dir am meisten?', 'Who in this group do you like the most?'),
    ('dare', 'spicy', 'Trinke dein Glas in einem Zug aus', 'Finish your drink in one go'),
]


def seed_questions():
    """Insert the built-in questions unless the bank already has some.

    Returns the number of questions added.
    """
    if Question.query.first() is not None:
        return 0
    for type_, mode, content, content_en in BUILTIN_QUESTIONS:
        db.session.add(Question(type=type_, mode=mode, content=content, content_en=content_en))
    db.session.commit()
    return len(BUILTIN_QUESTIONS)
