from droid_agent.cli import main

main()
