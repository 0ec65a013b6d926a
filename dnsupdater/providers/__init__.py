"""Provider clients (bunny, cloudflare, desec, digitalocean, ovh, pebble, in_memory) sharing one interface."""