# This package assembles context for prompts

# +---------------------+
# |      Memory         |   (Persistent, tiered, decays)
# |---------------------|
# | Working items       |
# | Sessions / turns    |
# | Concepts, patterns  |
# | Procedures          |
# +---------------------+

# +---------------------+
# |      State          |   (Current conversation)
# |---------------------|
# | Recent messages     |
# | Topics, sentiment   |
# | Mood, momentum      |
# +---------------------+

#    \    /
#     \  /
#      \/
# +------------------------------+
# |        Context window        |   (Rebuilt for every prompt)
# |------------------------------|
# | Project / session layers     |
# | Conversation layer           |
# | Semantic / temporal layers   |
# | Ranked, token-budgeted       |
# +------------------------------+
#         |
#         v
#   [prompt composer]
