# State = what the engine needs to continue the current conversation.

# Recent messages and the full log kept for the summary

# Topics seen so far and the sentiment of the latest user message

# Mood, recomputed after every user message

# Momentum, moved by explicit outcome signals

# Established context and clarified concepts
