from meme_maker.app import main

main()
