from quotejournal.app import main

main()
