"""Extension display-management metadata blocks, levels 1-6, 8-11, 254, 255 and reserved."""