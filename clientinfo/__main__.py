from clientinfo.server import main

main()
